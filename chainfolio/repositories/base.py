"""Store interfaces consumed by the valuation engine.

The engine only depends on these protocols; the sibling modules
provide the SQLAlchemy implementations and tests substitute in-memory fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional, Protocol, Sequence

from chainfolio.core.errors import ValidationError
from chainfolio.models.asset import AssetClass

UNIT_QUANTITY = Decimal(1)


@dataclass(frozen=True)
class PricePoint:
    """One dated price observation."""

    asset_id: str
    price: Decimal
    recorded_on: date


@dataclass(frozen=True)
class AssetRef:
    """Just enough of an asset for a price source to quote it."""

    id: str
    name: str
    asset_class: AssetClass
    contract_address: str
    chain: str


@dataclass(frozen=True)
class HoldingView:
    """A holding merged with its asset's metadata."""

    holding_id: str
    user_id: str
    asset_id: str
    asset_class: AssetClass
    name: str
    description: Optional[str]
    contract_address: str
    chain: str
    token_id: Optional[str]
    quantity: Optional[Decimal]
    created_at: Optional[datetime] = None
    asset_created_at: Optional[datetime] = None

    @property
    def has_quantity(self) -> bool:
        """False only for a fungible row whose quantity is NULL."""
        return self.asset_class is AssetClass.UNIQUE or self.quantity is not None

    @property
    def effective_quantity(self) -> Decimal:
        """Stored quantity for fungible holdings, exactly 1 for unique ones.

        Raises ``ValidationError`` (rule ``quantity_missing``) for a fungible
        holding without a quantity.
        """
        if self.asset_class is AssetClass.UNIQUE:
            return UNIT_QUANTITY
        if self.quantity is None:
            raise ValidationError(
                f"Fungible holding with ID {self.holding_id} has an invalid quantity", rule="quantity_missing"
            )
        return self.quantity


AppendStatus = Literal["created", "duplicate", "failed"]


@dataclass(frozen=True)
class AppendOutcome:
    asset_id: str
    recorded_on: date
    status: AppendStatus
    error: Optional[str] = None


class PriceStore(Protocol):
    async def append_price(self, asset_id: str, day: date, price: Decimal) -> None:
        """Insert one point; raises DuplicatePricePointError if (asset_id, day) exists."""
        ...

    async def append_prices(self, points: Sequence[PricePoint]) -> list[AppendOutcome]:
        """Insert points in one transaction, isolating each point's failure."""
        ...

    async def latest_price(self, asset_id: str) -> Optional[PricePoint]:
        ...

    async def earliest_price(self, asset_id: str) -> Optional[PricePoint]:
        ...

    async def price_series(
        self,
        asset_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PricePoint]:
        """Points in ascending date order; bounds are inclusive."""
        ...


class HoldingRepository(Protocol):
    async def list_holdings(self, user_id: str) -> list[HoldingView]:
        ...

    async def get_holding(self, holding_id: str, user_id: str) -> Optional[HoldingView]:
        ...

    async def create_holding(self, user_id: str, asset_id: str, quantity: Optional[Decimal]) -> str:
        ...

    async def delete_holding(self, holding_id: str, user_id: str) -> Optional[str]:
        """Delete and return the holding's asset id, or None when not found."""
        ...


class AssetRepository(Protocol):
    async def find_or_create_asset(
        self,
        contract_address: str,
        chain: str,
        asset_class: AssetClass,
        name: str,
        description: Optional[str] = None,
        token_id: Optional[str] = None,
    ) -> str:
        ...

    async def delete_if_orphaned(self, asset_id: str) -> bool:
        ...

    async def list_assets(self) -> list[AssetRef]:
        ...
