"""Holding workflow - create, list, remove holdings and build their history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainfolio.core.errors import NotFoundError, ValidationError
from chainfolio.core.logging import get_logger
from chainfolio.models.asset import AssetClass
from chainfolio.repositories.assets import SqlAssetRepository
from chainfolio.repositories.base import HoldingView, PriceStore
from chainfolio.repositories.holdings import SqlHoldingRepository
from chainfolio.repositories.prices import SqlPriceStore
from chainfolio.services.asset_terms import validate_asset_terms
from chainfolio.services.history import AssetHistory, compute_history, empty_history

log = get_logger("holding_service")


@dataclass(frozen=True)
class NewHolding:
    name: str
    asset_class: AssetClass
    contract_address: str
    chain: str
    description: Optional[str] = None
    token_id: Optional[str] = None
    quantity: object = None


@dataclass(frozen=True)
class CreatedHolding:
    message: str
    asset_id: str
    holding_id: str


class HoldingService:
    def __init__(
        self,
        db: AsyncSession,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        prices: Optional[PriceStore] = None,
    ):
        if prices is None and session_factory is None:
            raise ValueError("HoldingService needs a price store or a session factory")
        self.db = db
        self.holdings = SqlHoldingRepository(db)
        self.assets = SqlAssetRepository(db)
        self.prices = prices or SqlPriceStore(session_factory)

    async def create_holding(self, user_id: str, request: NewHolding) -> CreatedHolding:
        """Validate, find or create the asset by natural key, then add the holding."""
        terms = validate_asset_terms(request.asset_class, request.token_id, request.quantity)

        try:
            asset_id = await self.assets.find_or_create_asset(
                contract_address=request.contract_address,
                chain=request.chain,
                asset_class=terms.asset_class,
                name=request.name,
                description=request.description,
                token_id=terms.token_id,
            )
            holding_id = await self.holdings.create_holding(user_id, asset_id, terms.quantity)
            await self.db.commit()
        except Exception as exc:
            await self.db.rollback()
            log.error(f"Error creating holding for user {user_id}: {exc}")
            raise

        log.info(f"User {user_id} added holding {holding_id} of asset {asset_id}")
        return CreatedHolding(
            message="Asset added to user portfolio successfully",
            asset_id=asset_id,
            holding_id=holding_id,
        )

    async def list_holdings(self, user_id: str) -> List[HoldingView]:
        return await self.holdings.list_holdings(user_id)

    async def get_holding(self, holding_id: str, user_id: str) -> HoldingView:
        holding = await self.holdings.get_holding(holding_id, user_id)
        if not holding:
            raise NotFoundError(f"Asset with ID {holding_id} not found in user's portfolio")
        return holding

    async def remove_holding(self, holding_id: str, user_id: str) -> str:
        """Delete the holding, then its asset if no other holding references it."""
        try:
            asset_id = await self.holdings.delete_holding(holding_id, user_id)
            if asset_id is None:
                raise NotFoundError("User-asset entry not found in the portfolio")
            await self.assets.delete_if_orphaned(asset_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        log.info(f"User {user_id} removed holding {holding_id}")
        return "Asset removed from user portfolio successfully"

    async def get_holding_history(
        self,
        holding_id: str,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AssetHistory:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("startDate must not be after endDate", rule="date_range")

        holding = await self.get_holding(holding_id, user_id)
        quantity = holding.effective_quantity

        points = await self.prices.price_series(holding.asset_id, start_date, end_date)
        if not points:
            return empty_history(quantity)
        return compute_history(points, quantity)
