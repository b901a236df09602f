"""Ingestion entrypoint - Standalone script for running one daily price ingestion.

Usage:
    python -m chainfolio.ingest_entrypoint               # Price every asset for today (UTC)
    python -m chainfolio.ingest_entrypoint 2024-10-27    # Price every asset for a given day

Exits with status 1 when any asset could not be priced, so a cron or
container scheduler can retry; retries only fill the missing points.
"""

import asyncio
import sys
from datetime import date
from typing import Optional

from chainfolio.core.db import SessionLocal, engine
from chainfolio.core.logging import get_logger
from chainfolio.ingestion.runner import IngestionReport
from chainfolio.services.ingestion_service import IngestionService

logger = get_logger("ingest_entrypoint")


async def run_ingestion(day: Optional[date] = None) -> IngestionReport:
    """Run ingestion for one day."""
    try:
        async with SessionLocal() as db:
            service = IngestionService(db, SessionLocal)
            return await service.run(day)
    finally:
        await engine.dispose()


def parse_day(argv: list[str]) -> Optional[date]:
    if len(argv) < 2:
        return None
    try:
        return date.fromisoformat(argv[1])
    except ValueError:
        logger.error(f"Invalid date: {argv[1]}. Expected YYYY-MM-DD")
        sys.exit(2)


def main():
    """Main entry point for price ingestion."""
    logger.info("Price ingestion starting...")
    day = parse_day(sys.argv)

    report = asyncio.run(run_ingestion(day))

    logger.info(
        f"Price ingestion completed for {report.price_date.isoformat()}: "
        f"created={len(report.created)} duplicates={len(report.duplicates)} failed={len(report.failed)}"
    )

    if not report.success:
        sys.exit(1)

    return report


if __name__ == "__main__":
    main()
