"""
Page Decoder

Turns a raw page body into a PageResponse. Decoding is tolerant: a missing
``data`` field yields an empty batch, and the continuation token is looked up
in every location the API is known to use.

Cursor precedence (first non-empty match wins):
1. top-level ``cursor``
2. ``meta.cursor``
3. no cursor
"""

import logging
from typing import Any, Optional, Union

import orjson

from utils.errors import PageDecodeError
from utils.schemas import PageResponse

logger = logging.getLogger(__name__)


def decode_page(raw_body: Union[bytes, str]) -> PageResponse:
    """
    Parse a page response body.

    Args:
        raw_body: Response body as bytes or text

    Returns:
        PageResponse with records, next cursor and the advisory more flag

    Raises:
        PageDecodeError: If the body is not a JSON object
    """
    try:
        payload = orjson.loads(raw_body)
    except orjson.JSONDecodeError as e:
        raise PageDecodeError(f"Response body is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise PageDecodeError(
            f"Response body must be a JSON object, got {type(payload).__name__}"
        )

    return PageResponse(
        records=_extract_records(payload),
        next_cursor=_extract_cursor(payload),
        more_available=_extract_more_available(payload),
    )


def _extract_records(payload: dict[str, Any]) -> list[Any]:
    records = payload.get("data")
    if records is None:
        return []

    if not isinstance(records, list):
        logger.warning(
            "Ignoring non-list data field",
            extra={"data_type": type(records).__name__},
        )
        return []

    return records


def _extract_cursor(payload: dict[str, Any]) -> Optional[str]:
    cursor = _as_token(payload.get("cursor"))
    if cursor is not None:
        return cursor

    meta = payload.get("meta")
    if isinstance(meta, dict):
        return _as_token(meta.get("cursor"))

    return None


def _extract_more_available(payload: dict[str, Any]) -> Optional[bool]:
    has_more = payload.get("has_more")
    if isinstance(has_more, bool):
        return has_more
    return None


def _as_token(value: Any) -> Optional[str]:
    # Empty or non-string tokens count as absent
    if isinstance(value, str) and value:
        return value
    return None
