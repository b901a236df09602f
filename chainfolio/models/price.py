"""Append-only daily price observations."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from chainfolio.models.base import Base, generate_uuid


class AssetDailyPrice(Base):
    """One price point per asset per calendar day.

    The (asset_id, recorded_on) constraint is what keeps ingestion idempotent
    when a scheduled run and a manual trigger race.
    """

    __tablename__ = "asset_daily_prices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    asset_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(20, 6), nullable=False)

    recorded_on: Mapped[date] = mapped_column(Date, nullable=False)

    __table_args__ = (UniqueConstraint("asset_id", "recorded_on", name="uq_asset_recorded_on"),)
