"""Ingestion run log: backs /prices/runs and the health check."""

from datetime import date, datetime

from sqlalchemy import JSON, Date, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from chainfolio.models.base import Base, generate_uuid


class IngestionRun(Base):
    __tablename__ = "ingestion_runs"

    run_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    price_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,  # running | success | partial | failure
    )

    assets_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    points_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    duplicates: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # asset_id -> error message for assets that failed this run
    failures: Mapped[dict | None] = mapped_column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    error_message: Mapped[str | None] = mapped_column(String, nullable=True)

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
