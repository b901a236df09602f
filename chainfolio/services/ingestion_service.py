"""Daily price ingestion service: run bookkeeping around the ingestion runner."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainfolio.core.logging import get_logger
from chainfolio.ingestion.base import PriceSource
from chainfolio.ingestion.random_walk import RandomWalkPriceSource
from chainfolio.ingestion.runner import IngestionReport, IngestionRunner
from chainfolio.models.runs import IngestionRun
from chainfolio.repositories.assets import SqlAssetRepository
from chainfolio.repositories.base import PriceStore
from chainfolio.repositories.prices import SqlPriceStore

log = get_logger("ingestion_service")


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


class IngestionService:
    """Appends one price point per asset per day and records each run.

    Responsibilities:
    - List every known asset
    - Quote and append today's prices through the runner
    - Record the run (success | partial | failure) with the failed asset ids
    """

    def __init__(
        self,
        db: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        source: Optional[PriceSource] = None,
        prices: Optional[PriceStore] = None,
    ):
        self.db = db
        self.prices = prices or SqlPriceStore(session_factory)
        self.source = source or RandomWalkPriceSource(self.prices)
        self.assets = SqlAssetRepository(db)

    async def run(self, day: Optional[date] = None) -> IngestionReport:
        day = day or today_utc()
        run = IngestionRun(
            price_date=day,
            status="running",
            assets_total=0,
            points_created=0,
            duplicates=0,
            started_at=datetime.now(timezone.utc),
        )
        self.db.add(run)
        await self.db.commit()

        try:
            assets = await self.assets.list_assets()
            # Release the read transaction before the runner writes in its own session
            await self.db.commit()
            log.info(f"Starting price ingestion for {day.isoformat()} | assets={len(assets)}")

            report = await IngestionRunner(self.source, self.prices).run(assets, day)
        except Exception as exc:
            await self.db.rollback()
            run.status = "failure"
            run.error_message = str(exc)
            run.ended_at = datetime.now(timezone.utc)
            self.db.add(run)
            await self.db.commit()
            log.error(f"Price ingestion failed for {day.isoformat()}: {exc}")
            raise

        run.status = report.status
        run.assets_total = report.assets_total
        run.points_created = len(report.created)
        run.duplicates = len(report.duplicates)
        run.failures = report.failed or None
        run.ended_at = datetime.now(timezone.utc)
        await self.db.commit()

        if report.failed:
            log.error(f"Price ingestion for {day.isoformat()} left {len(report.failed)} asset(s) without a price: {sorted(report.failed)}")
        return report

    async def recent_runs(self, status: Optional[str] = None, limit: int = 10) -> List[IngestionRun]:
        stmt = select(IngestionRun)
        if status:
            stmt = stmt.where(IngestionRun.status == status)
        stmt = stmt.order_by(IngestionRun.started_at.desc()).limit(limit)
        return list((await self.db.execute(stmt)).scalars().all())

    async def latest_run(self) -> Optional[IngestionRun]:
        runs = await self.recent_runs(limit=1)
        return runs[0] if runs else None
