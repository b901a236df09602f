"""SQL-backed price store.

Every call opens its own short session from the factory, so concurrent
reads (portfolio fan-out) never share a session.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainfolio.core.errors import DuplicatePricePointError
from chainfolio.core.logging import get_logger
from chainfolio.models.price import AssetDailyPrice
from chainfolio.repositories.base import AppendOutcome, PricePoint

log = get_logger("repositories.prices")


def _to_point(row: AssetDailyPrice) -> PricePoint:
    return PricePoint(asset_id=row.asset_id, price=Decimal(row.price), recorded_on=row.recorded_on)


class SqlPriceStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    async def append_price(self, asset_id: str, day: date, price: Decimal) -> None:
        async with self._session_factory() as session:
            session.add(AssetDailyPrice(asset_id=asset_id, price=price, recorded_on=day))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                if await self._exists(session, asset_id, day):
                    raise DuplicatePricePointError(asset_id, day) from None
                raise

    async def append_prices(self, points: Sequence[PricePoint]) -> list[AppendOutcome]:
        """Write all points in one transaction with a savepoint per point.

        A failing point only rolls back its own savepoint; the rest commit
        together at the end.
        """
        outcomes: list[AppendOutcome] = []
        if not points:
            return outcomes

        async with self._session_factory() as session:
            async with session.begin():
                for point in points:
                    outcomes.append(await self._append_in_savepoint(session, point))
        return outcomes

    async def _append_in_savepoint(self, session: AsyncSession, point: PricePoint) -> AppendOutcome:
        try:
            async with session.begin_nested():
                session.add(
                    AssetDailyPrice(asset_id=point.asset_id, price=point.price, recorded_on=point.recorded_on)
                )
        except IntegrityError as exc:
            if await self._exists(session, point.asset_id, point.recorded_on):
                return AppendOutcome(point.asset_id, point.recorded_on, "duplicate")
            log.error(f"Integrity error writing price for asset {point.asset_id}: {exc.orig}")
            return AppendOutcome(point.asset_id, point.recorded_on, "failed", error=str(exc.orig))
        except SQLAlchemyError as exc:
            log.error(f"Failed to write price for asset {point.asset_id}: {exc}")
            return AppendOutcome(point.asset_id, point.recorded_on, "failed", error=str(exc))
        return AppendOutcome(point.asset_id, point.recorded_on, "created")

    @staticmethod
    async def _exists(session: AsyncSession, asset_id: str, day: date) -> bool:
        stmt = select(AssetDailyPrice.id).where(
            AssetDailyPrice.asset_id == asset_id,
            AssetDailyPrice.recorded_on == day,
        )
        return (await session.execute(stmt)).first() is not None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    async def latest_price(self, asset_id: str) -> Optional[PricePoint]:
        return await self._first(asset_id, newest=True)

    async def earliest_price(self, asset_id: str) -> Optional[PricePoint]:
        return await self._first(asset_id, newest=False)

    async def _first(self, asset_id: str, newest: bool) -> Optional[PricePoint]:
        order = AssetDailyPrice.recorded_on.desc() if newest else AssetDailyPrice.recorded_on.asc()
        stmt = select(AssetDailyPrice).where(AssetDailyPrice.asset_id == asset_id).order_by(order).limit(1)
        async with self._session_factory() as session:
            row = (await session.execute(stmt)).scalar_one_or_none()
        return _to_point(row) if row else None

    async def price_series(
        self,
        asset_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[PricePoint]:
        stmt = select(AssetDailyPrice).where(AssetDailyPrice.asset_id == asset_id)
        if start_date:
            stmt = stmt.where(AssetDailyPrice.recorded_on >= start_date)
        if end_date:
            stmt = stmt.where(AssetDailyPrice.recorded_on <= end_date)
        stmt = stmt.order_by(AssetDailyPrice.recorded_on.asc())

        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_point(row) for row in rows]
