"""Holding repository - user-scoped reads merged with asset metadata."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chainfolio.models.asset import Asset
from chainfolio.models.holding import Holding
from chainfolio.repositories.base import HoldingView


def _to_view(holding: Holding, asset: Asset) -> HoldingView:
    return HoldingView(
        holding_id=holding.id,
        user_id=holding.user_id,
        asset_id=asset.id,
        asset_class=asset.asset_class,
        name=asset.name,
        description=asset.description,
        contract_address=asset.contract_address,
        chain=asset.chain,
        token_id=asset.token_id,
        quantity=Decimal(holding.quantity) if holding.quantity is not None else None,
        created_at=holding.created_at,
        asset_created_at=asset.created_at,
    )


class SqlHoldingRepository:
    """Reads and writes through the caller's session; the caller commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _merged(self):
        return select(Holding, Asset).join(Asset, Asset.id == Holding.asset_id)

    async def list_holdings(self, user_id: str) -> list[HoldingView]:
        stmt = self._merged().where(Holding.user_id == user_id).order_by(Holding.created_at.asc(), Holding.id.asc())
        rows = (await self.db.execute(stmt)).all()
        return [_to_view(holding, asset) for holding, asset in rows]

    async def get_holding(self, holding_id: str, user_id: str) -> Optional[HoldingView]:
        stmt = self._merged().where(Holding.id == holding_id, Holding.user_id == user_id)
        row = (await self.db.execute(stmt)).first()
        if not row:
            return None
        holding, asset = row
        return _to_view(holding, asset)

    async def create_holding(self, user_id: str, asset_id: str, quantity: Optional[Decimal]) -> str:
        holding = Holding(user_id=user_id, asset_id=asset_id, quantity=quantity)
        self.db.add(holding)
        await self.db.flush()
        return holding.id

    async def delete_holding(self, holding_id: str, user_id: str) -> Optional[str]:
        stmt = select(Holding).where(Holding.id == holding_id, Holding.user_id == user_id)
        holding = (await self.db.execute(stmt)).scalar_one_or_none()
        if not holding:
            return None

        asset_id = holding.asset_id
        await self.db.delete(holding)
        await self.db.flush()
        return asset_id
