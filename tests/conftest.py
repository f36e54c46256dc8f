"""Pytest configuration and fixtures."""

from typing import Any, Callable, Optional

import httpx
import orjson
import pytest

from utils.config import Settings


def page_body(
    records: list[dict[str, Any]],
    cursor: Optional[str] = None,
    meta_cursor: Optional[str] = None,
    has_more: Optional[bool] = None,
) -> dict[str, Any]:
    """Build an API page body."""
    body: dict[str, Any] = {"data": records}
    if cursor is not None:
        body["cursor"] = cursor
    if meta_cursor is not None:
        body["meta"] = {"cursor": meta_cursor}
    if has_more is not None:
        body["has_more"] = has_more
    return body


def make_records(count: int, start: int = 0, **fields: Any) -> list[dict[str, Any]]:
    """Build ``count`` records with sequential ids."""
    return [{"id": start + i, **fields} for i in range(count)]


class FakeApi:
    """Scripted API: returns one queued response per request and records every request."""

    def __init__(self, responses: list[httpx.Response]) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.url}")
        return self.responses.pop(0)

    @property
    def cursors(self) -> list[Optional[str]]:
        return [request.url.params.get("cursor") for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def json_response(body: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=orjson.dumps(body))


class SleepRecorder:
    """Awaitable stand-in for asyncio.sleep that records the delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    """Settings factory writing output into tmp_path."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "JWT_TOKEN": "test-token",
            "API_BASE_URL": "https://api.test/api",
            "API_RESOURCE_PATH": "ekatalog-archive/paket-e-purchasing",
            "HARVEST_YEAR": 2024,
            "HARVEST_KODE_KLPD": "K34",
            "HARVEST_PAGE_SIZE": 100,
            "HARVEST_DELAY_SECONDS": 1.0,
            "HARVEST_MAX_RETRIES": 0,
            "HARVEST_RETRY_BACKOFF_MIN": 0,
            "HARVEST_RETRY_BACKOFF_MAX": 0,
            "OUTPUT_DIR": str(tmp_path),
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
