"""
Pager - Cursor Pagination State Machine

Drives one harvest: builds each page request, sends it, decodes the body,
appends the records and decides whether another page exists.

States:
    FETCHING -> DECIDING -> (FETCHING | DONE | FAILED)

Features:
- Continuation inferred from the advisory has_more flag, page fullness and cursor presence
- Infinite-loop guard when has_more is set without a cursor
- Courtesy delay between pages only (never before the first or after the last)
- Optional bounded retry with exponential backoff for rate-limit statuses (tenacity)
- Transport failures end the loop without losing accumulated records

Usage:
    pager = Pager(config, client, token)
    outcome = await pager.run_harvest(accumulator)
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_exponential

from apps.harvester.accumulator import Accumulator
from apps.harvester.decoder import decode_page
from utils.errors import PaginationAnomaly, TransportError
from utils.schemas import HarvestConfig, HarvestOutcome, HarvestStatus, PageRequest, PageResponse

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class PagerState(str, Enum):
    FETCHING = "fetching"
    DECIDING = "deciding"
    DONE = "done"
    FAILED = "failed"


@dataclass
class HarvestState:
    """Mutable loop state, owned by the pager for one harvest call."""

    accumulated: Accumulator
    current_cursor: Optional[str] = None
    page_index: int = 1
    continuing: bool = True


class Pager:
    """
    Fetches every page of a cursor-paginated resource, one request at a time.

    Handles:
    - Request construction from config and the current cursor
    - Continuation decision and cursor hand-off
    - Inter-page pacing
    - Retry of rate-limited requests when enabled
    """

    def __init__(
        self,
        config: HarvestConfig,
        client: httpx.AsyncClient,
        token: str,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """
        Initialize pager.

        Args:
            config: Harvest run parameters
            client: HTTP client used for every page request
            token: Bearer token sent with each request
            sleep: Awaitable used for the inter-page delay
        """
        self.config = config
        self.client = client
        self.state = PagerState.FETCHING
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._sleep = sleep

    async def run_harvest(self, accumulator: Accumulator) -> HarvestOutcome:
        """
        Fetch pages until the API runs out of data or a request fails.

        Records are appended to ``accumulator`` as each page arrives, so the
        caller keeps everything fetched before a failure.

        Args:
            accumulator: Destination for the harvested records

        Returns:
            HarvestOutcome with status completed or failed-with-partial
        """
        harvest = HarvestState(accumulated=accumulator)
        pages_fetched = 0
        anomaly: Optional[str] = None

        self._transition(PagerState.FETCHING)

        while harvest.continuing:
            request = self.build_request(harvest.current_cursor)

            logger.info(
                "Fetching page %d... (Total accumulated: %d)",
                harvest.page_index,
                len(harvest.accumulated),
                extra={"page": harvest.page_index, "total": len(harvest.accumulated)},
            )

            try:
                page = await self._fetch_page(request)
            except TransportError as e:
                self._transition(PagerState.FAILED)
                logger.error(
                    "Harvest aborted on page %d: %s",
                    harvest.page_index,
                    e,
                    extra={
                        "page": harvest.page_index,
                        "status_code": e.status_code,
                        "total": len(harvest.accumulated),
                    },
                )
                return HarvestOutcome(
                    status=HarvestStatus.FAILED_WITH_PARTIAL,
                    pages_fetched=pages_fetched,
                    record_count=len(harvest.accumulated),
                    error=str(e),
                )

            pages_fetched += 1
            harvest.accumulated.append(page.records)

            self._transition(PagerState.DECIDING)
            try:
                harvest.continuing = self.decide_continuation(page)
            except PaginationAnomaly as e:
                anomaly = str(e)
                logger.warning(
                    "Pagination anomaly on page %d: %s",
                    harvest.page_index,
                    e,
                    extra={"page": harvest.page_index, "batch_size": len(page.records)},
                )
                harvest.continuing = False

            if not harvest.continuing:
                break

            harvest.current_cursor = page.next_cursor
            harvest.page_index += 1
            await self._sleep(self.config.inter_page_delay)
            self._transition(PagerState.FETCHING)

        self._transition(PagerState.DONE)

        logger.info(
            "Harvest completed: %d records in %d pages",
            len(harvest.accumulated),
            pages_fetched,
            extra={"pages": pages_fetched, "total": len(harvest.accumulated)},
        )

        return HarvestOutcome(
            status=HarvestStatus.COMPLETED,
            pages_fetched=pages_fetched,
            record_count=len(harvest.accumulated),
            anomaly=anomaly,
        )

    def build_request(self, cursor: Optional[str]) -> PageRequest:
        """Build the request for the page that starts at ``cursor``."""
        return PageRequest(
            base_url=self.config.base_url,
            resource_path=self.config.resource_path,
            page_size=self.config.page_size,
            filter_params=self.config.filter_params,
            cursor=cursor,
        )

    def decide_continuation(self, page: PageResponse) -> bool:
        """
        Decide whether another page should be requested after ``page``.

        Raises:
            PaginationAnomaly: If the page asks to continue but carries no cursor
        """
        continuing = self._should_continue(page)
        if continuing and page.next_cursor is None:
            raise PaginationAnomaly(
                "has_more is true but no cursor found. Stopping to prevent infinite loop."
            )
        return continuing

    def _should_continue(self, page: PageResponse) -> bool:
        # The has_more flag and the fullness heuristic are inferred API
        # behaviour; a full page without a cursor ends the harvest.
        full_page = len(page.records) == self.config.page_size
        return bool(page.more_available) or (full_page and page.next_cursor is not None)

    async def _fetch_page(self, request: PageRequest) -> PageResponse:
        if self.config.max_consecutive_failures == 0:
            return await self._request_page(request)

        retrying = AsyncRetrying(
            retry=retry_if_exception(self._is_retryable),
            stop=stop_after_attempt(self.config.max_consecutive_failures + 1),
            wait=wait_exponential(
                multiplier=1,
                min=self.config.retry_backoff_min,
                max=self.config.retry_backoff_max,
            ),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(self._request_page, request)

    async def _request_page(self, request: PageRequest) -> PageResponse:
        try:
            response = await self.client.get(
                request.url,
                params=request.params,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Request failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"HTTP Error! Status: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return decode_page(response.content)

    def _is_retryable(self, error: BaseException) -> bool:
        return (
            isinstance(error, TransportError)
            and error.status_code in self.config.retry_status_codes
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "Rate limited (attempt %d/%d), retrying in %.1fs: %s",
            retry_state.attempt_number,
            self.config.max_consecutive_failures + 1,
            wait,
            error,
            extra={"attempt": retry_state.attempt_number, "wait_seconds": wait},
        )

    def _transition(self, new_state: PagerState) -> None:
        logger.debug("Pager state %s -> %s", self.state.value, new_state.value)
        self.state = new_state
