# Services package
from chainfolio.services.asset_terms import Fungible, Unique, validate_asset_terms
from chainfolio.services.history import AssetHistory, HistoryEntry, compute_history
from chainfolio.services.holding_service import CreatedHolding, HoldingService, NewHolding
from chainfolio.services.ingestion_service import IngestionService
from chainfolio.services.portfolio_service import PortfolioService, PortfolioValue

__all__ = [
    "Fungible",
    "Unique",
    "validate_asset_terms",
    "AssetHistory",
    "HistoryEntry",
    "compute_history",
    "CreatedHolding",
    "HoldingService",
    "NewHolding",
    "IngestionService",
    "PortfolioService",
    "PortfolioValue",
]
