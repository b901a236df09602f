"""Simulated daily prices: bounded random walk from the last recorded price."""

from __future__ import annotations

import random
from datetime import date
from decimal import Decimal
from typing import Optional

from chainfolio.core.config import settings
from chainfolio.core.logging import get_logger
from chainfolio.repositories.base import AssetRef, PriceStore
from .base import PriceSource

log = get_logger("ingestion.random_walk")


class RandomWalkPriceSource(PriceSource):
    """Stand-in for a market feed.

    First listing: uniform seed price in [seed_min, seed_max].
    Afterwards: prior * (1 + u) with u uniform in [-max_step, +max_step].
    """

    name = "random_walk"

    def __init__(
        self,
        prices: PriceStore,
        max_step: Optional[float] = None,
        seed_min: Optional[float] = None,
        seed_max: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.prices = prices
        self.max_step = settings.PRICE_WALK_MAX_STEP if max_step is None else max_step
        self.seed_min = settings.SEED_PRICE_MIN if seed_min is None else seed_min
        self.seed_max = settings.SEED_PRICE_MAX if seed_max is None else seed_max
        self.rng = rng or random.Random()

        if not 0 <= self.max_step < 1:
            raise ValueError(f"max_step must be in [0, 1), got {self.max_step}")
        if not 0 < self.seed_min <= self.seed_max:
            raise ValueError(f"Invalid seed price range [{self.seed_min}, {self.seed_max}]")

    async def quote(self, asset: AssetRef, day: date) -> Decimal:
        previous = await self.prices.latest_price(asset.id)
        if previous is None:
            price = Decimal(str(self.rng.uniform(self.seed_min, self.seed_max)))
            log.debug(f"Seeding first price for {asset.name} ({asset.id}): {price}")
        else:
            step = Decimal(str(self.rng.uniform(-self.max_step, self.max_step)))
            price = previous.price * (1 + step)
        return self.quantize(price)
