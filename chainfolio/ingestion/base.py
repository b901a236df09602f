"""Abstract price source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from chainfolio.repositories.base import AssetRef

PRICE_PRECISION = Decimal("0.000001")


class PriceSource(ABC):
    """Produces one price for an asset on a given day.

    The ingestion runner only depends on this contract, so a real market
    feed can replace the simulated one without touching the runner.
    """

    name: str

    @abstractmethod
    async def quote(self, asset: AssetRef, day: date) -> Decimal:
        """Return the asset's price for ``day`` (non-negative, 6 fractional digits)."""

    @staticmethod
    def quantize(price: Decimal) -> Decimal:
        return price.quantize(PRICE_PRECISION, rounding=ROUND_HALF_UP)
