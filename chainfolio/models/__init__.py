from chainfolio.models.base import Base
from chainfolio.models.asset import Asset, AssetClass, Chain
from chainfolio.models.holding import Holding
from chainfolio.models.price import AssetDailyPrice
from chainfolio.models.runs import IngestionRun

__all__ = [
    "Base",
    "Asset",
    "AssetClass",
    "Chain",
    "Holding",
    "AssetDailyPrice",
    "IngestionRun",
]
