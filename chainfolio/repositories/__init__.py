from chainfolio.repositories.base import (
    AppendOutcome,
    AssetRef,
    AssetRepository,
    HoldingRepository,
    HoldingView,
    PricePoint,
    PriceStore,
)
from chainfolio.repositories.assets import SqlAssetRepository
from chainfolio.repositories.holdings import SqlHoldingRepository
from chainfolio.repositories.prices import SqlPriceStore

__all__ = [
    "AppendOutcome",
    "AssetRef",
    "AssetRepository",
    "HoldingRepository",
    "HoldingView",
    "PricePoint",
    "PriceStore",
    "SqlAssetRepository",
    "SqlHoldingRepository",
    "SqlPriceStore",
]
