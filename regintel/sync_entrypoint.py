"""Sync entrypoint - Standalone backfill script.

Usage:
    python -m regintel.sync_entrypoint                  # FDA, FSIS, CDC and EPA, last 30 days
    python -m regintel.sync_entrypoint FDA              # Single source
    python -m regintel.sync_entrypoint EPA --days 90    # Single source, custom window
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from regintel.core.config import settings
from regintel.core.db import SessionLocal
from regintel.core.logging import get_logger
from regintel.ingestion import create_client
from regintel.schemas.sync import SyncResult
from regintel.services.alert_store import AlertStore, SqlAlertStore
from regintel.services.sync_service import SOURCE_NAMES, AlertSyncService, build_default_sources

logger = get_logger("sync_entrypoint")

MAX_ERRORS_SHOWN = 3


async def run_sync(source: Optional[str], days: int, store: Optional[AlertStore] = None) -> List[SyncResult]:
    """Run one source, or all core sources when ``source`` is None."""
    async with create_client(settings) as client:
        service = AlertSyncService(
            store or SqlAlertStore(SessionLocal),
            build_default_sources(settings, client),
            batch_size=settings.SYNC_BATCH_SIZE,
            days_back=days,
        )
        if source:
            logger.info(f"Starting sync job for source: {source} (last {days} days)")
            return [await service.sync_source(source, days)]
        logger.info(f"Running sync for all sources (last {days} days)")
        return await service.sync_all_sources(days)


def print_report(results: List[SyncResult]) -> None:
    for result in results:
        print(
            f"{result.source:<17} {result.status:<9} fetched={result.alerts_fetched} "
            f"inserted={result.alerts_inserted} updated={result.alerts_updated} "
            f"skipped={result.alerts_skipped} errors={len(result.errors)}"
        )
        for error in result.errors[:MAX_ERRORS_SHOWN]:
            print(f"    - {error}")
        if len(result.errors) > MAX_ERRORS_SHOWN:
            print(f"    ... and {len(result.errors) - MAX_ERRORS_SHOWN} more")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Backfill regulatory alerts into the alert store.")
    parser.add_argument(
        "source",
        nargs="?",
        type=str.upper,
        choices=SOURCE_NAMES,
        help="Source to sync (default: FDA, FSIS, CDC and EPA)",
    )
    parser.add_argument("--days", type=int, default=settings.SYNC_DAYS_BACK, help="Lookback window in days")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit code."""
    args = build_parser().parse_args(argv)
    if args.days < 0:
        logger.error(f"Invalid --days value: {args.days}. Must be >= 0")
        return 2

    logger.info("Sync pipeline starting...")
    results = asyncio.run(run_sync(args.source, args.days))
    print_report(results)

    failed = [r.source for r in results if r.errors]
    if failed:
        logger.warning(f"Sync completed with errors for: {', '.join(failed)}")
        return 1
    logger.info("Sync pipeline completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
