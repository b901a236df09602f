"""Asset repository - natural-key dedup and orphan cleanup."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from chainfolio.core.logging import get_logger
from chainfolio.models.asset import Asset, AssetClass
from chainfolio.models.holding import Holding
from chainfolio.repositories.base import AssetRef

log = get_logger("repositories.assets")


class SqlAssetRepository:
    """Reads and writes through the caller's session; the caller commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_or_create_asset(
        self,
        contract_address: str,
        chain: str,
        asset_class: AssetClass,
        name: str,
        description: Optional[str] = None,
        token_id: Optional[str] = None,
    ) -> str:
        """Return the id of the asset with this (contract_address, chain, class), creating it if absent."""
        existing = await self._find_by_natural_key(contract_address, chain, asset_class)
        if existing:
            return existing

        asset = Asset(
            name=name,
            asset_class=asset_class,
            description=description,
            contract_address=contract_address,
            chain=chain,
            token_id=token_id,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(asset)
        except IntegrityError:
            # A concurrent request inserted the same natural key first
            existing = await self._find_by_natural_key(contract_address, chain, asset_class)
            if existing:
                return existing
            raise

        log.info(f"Created asset {asset.id} ({name}, {asset_class.value} on {chain})")
        return asset.id

    async def _find_by_natural_key(self, contract_address: str, chain: str, asset_class: AssetClass) -> Optional[str]:
        stmt = select(Asset.id).where(
            Asset.contract_address == contract_address,
            Asset.chain == chain,
            Asset.asset_class == asset_class,
        )
        return (await self.db.execute(stmt)).scalar_one_or_none()

    async def delete_if_orphaned(self, asset_id: str) -> bool:
        """Delete the asset (and, by cascade, its prices) when no holding references it."""
        stmt = select(func.count()).select_from(Holding).where(Holding.asset_id == asset_id)
        remaining = (await self.db.execute(stmt)).scalar() or 0
        if remaining:
            return False

        await self.db.execute(delete(Asset).where(Asset.id == asset_id))
        log.info(f"Deleted orphaned asset {asset_id}")
        return True

    async def list_assets(self) -> list[AssetRef]:
        stmt = select(Asset).order_by(Asset.created_at.asc(), Asset.id.asc())
        rows = (await self.db.execute(stmt)).scalars().all()
        return [
            AssetRef(
                id=row.id,
                name=row.name,
                asset_class=row.asset_class,
                contract_address=row.contract_address,
                chain=row.chain,
            )
            for row in rows
        ]
