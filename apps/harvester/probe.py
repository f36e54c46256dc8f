"""
API Probe - Pagination Diagnostics

Requests a single record and reports where the response keeps its
pagination fields (root cursor, meta, has_more, pagination, next_page_url).
Run it against a new deployment before trusting the pager's continuation
heuristic.

Usage:
    python -m apps.harvester probe
"""

import logging
from typing import Optional

import httpx
import orjson

from apps.harvester.job import build_harvest_config, http_client, require_token
from utils.config import Settings
from utils.errors import PageDecodeError, TransportError
from utils.schemas import PageRequest, ProbeReport

logger = logging.getLogger(__name__)


async def probe_api(
    settings: Settings,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> ProbeReport:
    """
    Fetch one record and describe the response envelope.

    Args:
        settings: Run configuration (same filters as a harvest)
        client: HTTP client to use; a new one is opened and closed if omitted

    Returns:
        ProbeReport describing the root keys and pagination fields

    Raises:
        ConfigurationError: If the bearer token is missing
        TransportError: If the request fails or returns a non-success status
    """
    token = require_token(settings)
    config = build_harvest_config(settings)
    request = PageRequest(
        base_url=config.base_url,
        resource_path=config.resource_path,
        page_size=1,
        filter_params=config.filter_params,
    )

    async with http_client(settings, client) as http:
        try:
            response = await http.get(
                request.url,
                params=request.params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Probe request failed: {e}") from e

    if not response.is_success:
        raise TransportError(
            f"Probe failed! Status: {response.status_code} - {response.text}",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        payload = orjson.loads(response.content)
    except orjson.JSONDecodeError as e:
        raise PageDecodeError(f"Probe response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise PageDecodeError("Probe response is not a JSON object")

    report = ProbeReport(
        status_code=response.status_code,
        root_keys=list(payload),
        meta=payload.get("meta"),
        cursor_at_root=payload.get("cursor"),
        pagination=payload.get("pagination"),
        next_page_url=payload.get("next_page_url"),
        has_cursor_key="cursor" in payload,
        has_more_key="has_more" in payload,
    )

    logger.info("Root keys: %s", report.root_keys, extra=report.model_dump())

    return report
