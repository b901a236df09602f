"""Orchestration logic for daily price ingestion."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from chainfolio.core.config import settings
from chainfolio.core.logging import get_logger
from chainfolio.repositories.base import AssetRef, PricePoint, PriceStore
from .base import PriceSource

log = get_logger("ingestion.runner")


@dataclass
class IngestionReport:
    """Per-asset outcome of one run. Failed assets can be retried; the date keeps retries idempotent."""

    price_date: date
    assets_total: int = 0
    created: List[str] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def status(self) -> str:
        return "success" if self.success else "partial"


class IngestionRunner:
    """Quotes every asset, then appends all points for the day in one batch."""

    def __init__(self, source: PriceSource, prices: PriceStore, concurrency: Optional[int] = None):
        self.source = source
        self.prices = prices
        self.concurrency = max(1, concurrency or settings.INGESTION_CONCURRENCY)

    async def run(self, assets: Sequence[AssetRef], day: date) -> IngestionReport:
        report = IngestionReport(price_date=day, assets_total=len(assets))
        if not assets:
            log.info(f"No assets to price for {day.isoformat()}")
            return report

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(asset: AssetRef) -> Decimal:
            async with semaphore:
                return await self.source.quote(asset, day)

        quotes = await asyncio.gather(*(bounded(asset) for asset in assets), return_exceptions=True)

        points: List[PricePoint] = []
        for asset, quote in zip(assets, quotes):
            if isinstance(quote, Exception):
                log.error(f"Price source {self.source.name} failed for asset {asset.id}: {quote}")
                report.failed[asset.id] = f"quote failed: {quote}"
                continue
            if quote < 0:
                log.error(f"Price source {self.source.name} returned negative price {quote} for asset {asset.id}")
                report.failed[asset.id] = f"negative price: {quote}"
                continue
            points.append(PricePoint(asset_id=asset.id, price=quote, recorded_on=day))

        for outcome in await self.prices.append_prices(points):
            if outcome.status == "created":
                report.created.append(outcome.asset_id)
            elif outcome.status == "duplicate":
                log.info(f"Price for asset {outcome.asset_id} on {day.isoformat()} already recorded; skipping")
                report.duplicates.append(outcome.asset_id)
            else:
                report.failed[outcome.asset_id] = outcome.error or "write failed"

        log.info(
            f"Ingestion {day.isoformat()} source={self.source.name} assets={report.assets_total} "
            f"created={len(report.created)} duplicates={len(report.duplicates)} failed={len(report.failed)}"
        )
        return report
