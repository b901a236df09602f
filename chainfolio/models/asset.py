"""Canonical record of a trackable on-chain instrument."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chainfolio.models.base import Base, generate_uuid


class AssetClass(str, enum.Enum):
    """Fungible assets are quantity-bearing (ERC-20); unique assets are one-of-a-kind (ERC-721)."""

    FUNGIBLE = "fungible"
    UNIQUE = "unique"


class Chain(str, enum.Enum):
    ETHEREUM = "Ethereum"
    POLYGON = "Polygon"
    ARBITRUM = "Arbitrum"


class Asset(Base):
    """An on-chain instrument shared by every holding that references it.

    (contract_address, chain, asset_class) is the natural key: creating an
    asset with an existing tuple returns the stored row instead.
    """

    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    asset_class: Mapped[AssetClass] = mapped_column(
        Enum(AssetClass, native_enum=False, length=10, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    contract_address: Mapped[str] = mapped_column(String(42), nullable=False, comment="Token contract address (0x...)")

    chain: Mapped[str] = mapped_column(String(50), nullable=False)

    token_id: Mapped[str | None] = mapped_column(String(100), nullable=True, comment="Instance id, unique assets only")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    holdings = relationship("Holding", back_populates="asset")

    __table_args__ = (
        UniqueConstraint("contract_address", "chain", "asset_class", name="uq_asset_natural_key"),
    )
