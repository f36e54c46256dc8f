"""
Harvest Job - End-to-End Run

Runs one harvest and always finishes with an export attempt:
- Validates the bearer token before any request is made
- Runs the pager over a fresh accumulator
- Exports from a single finally block, labelled by the terminal status
  (complete run vs. emergency save of partial data)

Output:
- {OUTPUT_DIR}/{OUTPUT_FILENAME_PREFIX}_{year}_full_{YYYY-MM-DDTHH-MM-SS-mmm}.xlsx
- {OUTPUT_DIR}/emergency_{EMERGENCY_FILENAME_PREFIX}_{year}_{epoch_ms}.xlsx on failure

Usage:
    from apps.harvester.job import run_harvest_job
    from utils.config import settings

    report = await run_harvest_job(settings)
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Optional, Sequence

import httpx

from apps.harvester.accumulator import Accumulator
from apps.harvester.exporter import export_records
from apps.harvester.pager import Pager, SleepFunc
from utils.config import Settings
from utils.errors import ConfigurationError
from utils.schemas import ExportResult, HarvestConfig, HarvestOutcome, HarvestReport, HarvestStatus

logger = logging.getLogger(__name__)

EMERGENCY_LABEL = "Emergency Save"


def require_token(settings: Settings) -> str:
    """
    Return the bearer token or fail before anything is requested.

    Raises:
        ConfigurationError: If JWT_TOKEN is empty
    """
    token = settings.JWT_TOKEN.strip()
    if not token:
        raise ConfigurationError("JWT_TOKEN not found in environment or .env file")
    return token


def build_harvest_config(settings: Settings) -> HarvestConfig:
    """Map settings onto the pager's run parameters."""
    return HarvestConfig(
        base_url=settings.API_BASE_URL,
        resource_path=settings.API_RESOURCE_PATH,
        page_size=settings.HARVEST_PAGE_SIZE,
        filter_params={
            "kode_klpd": settings.HARVEST_KODE_KLPD,
            "tahun": str(settings.HARVEST_YEAR),
        },
        inter_page_delay=settings.HARVEST_DELAY_SECONDS,
        max_consecutive_failures=settings.HARVEST_MAX_RETRIES,
        retry_status_codes=settings.HARVEST_RETRY_STATUS_CODES,
        retry_backoff_min=settings.HARVEST_RETRY_BACKOFF_MIN,
        retry_backoff_max=settings.HARVEST_RETRY_BACKOFF_MAX,
    )


def export_harvest(
    records: Sequence[Any],
    status: HarvestStatus,
    settings: Settings,
    now: Optional[datetime] = None,
) -> Optional[ExportResult]:
    """
    Export records under the naming scheme for ``status``.

    Completed runs get a sortable timestamp to the millisecond; partial runs get an
    ``emergency_`` prefix and an epoch-millisecond stamp.

    Args:
        records: Accumulated records
        status: Terminal harvest status
        settings: Output naming configuration
        now: Export time, defaults to the current UTC time

    Returns:
        ExportResult, or None if there was nothing to export
    """
    now = now or datetime.now(timezone.utc)
    year = settings.HARVEST_YEAR

    if status is HarvestStatus.COMPLETED:
        if not records:
            logger.info("No data found for year %d", year, extra={"year": year})
        return export_records(
            records,
            f"{settings.DATASET_LABEL} {year}",
            f"{settings.OUTPUT_FILENAME_PREFIX}_{year}_full",
            output_dir=settings.OUTPUT_DIR,
            stamp=f"{now.strftime('%Y-%m-%dT%H-%M-%S')}-{now.microsecond // 1000:03d}",
        )

    if not records:
        logger.warning("Harvest failed before any data was fetched, nothing to save")
        return None

    logger.warning(
        "Performing emergency save of %d fetched records",
        len(records),
        extra={"records": len(records)},
    )
    return export_records(
        records,
        EMERGENCY_LABEL,
        f"emergency_{settings.EMERGENCY_FILENAME_PREFIX}_{year}",
        output_dir=settings.OUTPUT_DIR,
        stamp=str(int(now.timestamp() * 1000)),
    )


async def run_harvest_job(
    settings: Settings,
    *,
    client: Optional[httpx.AsyncClient] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> HarvestReport:
    """
    Run one harvest end to end.

    Args:
        settings: Run configuration
        client: HTTP client to use; a new one is opened and closed if omitted
        sleep: Awaitable used for the inter-page delay

    Returns:
        HarvestReport with the pager outcome and the written file, if any

    Raises:
        ConfigurationError: If the bearer token is missing (nothing is requested)
        ExportError: If the workbook cannot be written
    """
    token = require_token(settings)
    config = build_harvest_config(settings)
    accumulator = Accumulator()
    outcome: Optional[HarvestOutcome] = None
    export: Optional[ExportResult] = None
    started = time.monotonic()

    logger.info(
        "=== Starting harvest for year %d ===",
        settings.HARVEST_YEAR,
        extra={
            "resource": config.resource_path,
            "filters": config.filter_params,
            "page_size": config.page_size,
        },
    )

    try:
        async with http_client(settings, client) as http:
            pager = Pager(config, http, token, sleep=sleep)
            outcome = await pager.run_harvest(accumulator)
    except Exception as e:
        logger.error(
            "Harvest aborted by unexpected error: %s",
            e,
            extra={"total": len(accumulator)},
            exc_info=True,
        )
        raise
    finally:
        status = outcome.status if outcome else HarvestStatus.FAILED_WITH_PARTIAL
        export = export_harvest(accumulator.snapshot(), status, settings)

    logger.info(
        "=== Finished! Total records: %d ===",
        outcome.record_count,
        extra={
            "status": outcome.status.value,
            "pages": outcome.pages_fetched,
            "output_file": export.filename if export else None,
            "duration_seconds": round(time.monotonic() - started, 2),
        },
    )

    return HarvestReport(outcome=outcome, export=export)


@asynccontextmanager
async def http_client(
    settings: Settings, client: Optional[httpx.AsyncClient]
) -> AsyncIterator[httpx.AsyncClient]:
    if client is not None:
        yield client
        return

    timeout = settings.API_TIMEOUT or None
    async with httpx.AsyncClient(timeout=timeout) as owned:
        yield owned
