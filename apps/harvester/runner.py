"""
Harvest Runner - Process Entry Point

Configures logging, runs a harvest (or the API probe) and maps the result
onto a process exit code.

Exit codes:
- 0: harvest completed (or probe succeeded)
- 1: harvest failed mid-run (partial data exported), export or probe failed
- 2: configuration error, nothing was requested

Usage:
    python -m apps.harvester          # full harvest
    python -m apps.harvester probe    # one-record diagnostic request
"""

import asyncio
import logging
import sys
from typing import Optional, Sequence

from apps.harvester.job import run_harvest_job
from apps.harvester.probe import probe_api
from utils.config import Settings, get_settings
from utils.errors import ConfigurationError, ExportError, TransportError
from utils.logging import setup_logging
from utils.schemas import HarvestStatus

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


async def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    """Main entry point for the harvester."""
    argv = sys.argv[1:] if argv is None else argv
    settings = settings or get_settings()

    setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

    mode = argv[0] if argv else "harvest"
    if mode not in ("harvest", "probe"):
        logger.error("Unknown mode %r, expected 'harvest' or 'probe'", mode)
        return EXIT_CONFIG

    try:
        if mode == "probe":
            await probe_api(settings)
            return EXIT_OK

        report = await run_harvest_job(settings)

    except ConfigurationError as e:
        logger.error("Error: %s", e)
        return EXIT_CONFIG

    except TransportError as e:
        logger.error("Request failed: %s", e, extra={"status_code": e.status_code})
        return EXIT_FAILED

    except ExportError as e:
        logger.error("Export failed: %s", e, exc_info=True)
        return EXIT_FAILED

    if report.outcome.status is HarvestStatus.FAILED_WITH_PARTIAL:
        if report.export:
            logger.warning("Partial data saved to: %s", report.export.filename)
        return EXIT_FAILED

    return EXIT_OK


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(asyncio.run(main()))
