from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from chainfolio.models.asset import AssetClass, Chain


class CreateHoldingRequest(BaseModel):
    """Body of POST /assets. Class/field combinations are checked by the service."""

    name: str = Field(..., min_length=1, max_length=255)
    asset_class: str = Field(..., description="fungible | unique")
    description: Optional[str] = None
    contract_address: str = Field(..., min_length=1, max_length=42)
    chain: Chain
    token_id: Optional[str] = Field(None, max_length=100, description="Instance id, unique assets only")
    quantity: Optional[Any] = Field(None, description="Positive amount, fungible assets only")


class CreateHoldingResponse(BaseModel):
    message: str
    asset_id: str
    holding_id: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class HoldingOut(BaseModel):
    """A holding merged with its asset's metadata."""

    id: str
    user_id: str
    asset_id: str
    quantity: Optional[float] = None
    created_at: Optional[datetime] = None
    name: str
    asset_class: AssetClass
    description: Optional[str] = None
    contract_address: str
    chain: str
    token_id: Optional[str] = None
    asset_created_at: Optional[datetime] = None


class HistoryEntryOut(BaseModel):
    date: date
    price: str
    value: int
    daily_pnl: int
    cumulative_pnl: int
    cumulative_pnl_percentage: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class AssetHistoryOut(BaseModel):
    history: list[HistoryEntryOut]
    quantity: str
    overall_pnl: int
    overall_pnl_percentage: float

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PortfolioValueOut(BaseModel):
    total_value: float = Field(..., description="Current value of all holdings", examples=[10000])
    pnl: float = Field(..., description="Value minus initial cost", examples=[500])
    pnl_percentage: float = Field(..., description="PnL relative to initial cost", examples=[5])

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


class IngestionReportOut(BaseModel):
    success: bool
    price_date: date
    assets_total: int
    created: int
    duplicates: int
    failed: dict[str, str]


class IngestionRunOut(BaseModel):
    run_id: str
    price_date: date
    status: str
    assets_total: int
    points_created: int
    duplicates: int
    failures: Optional[dict[str, str]] = None
    error_message: str | None = None
    started_at: datetime | None
    ended_at: datetime | None

    class Config:
        from_attributes = True


class HealthResponse(BaseModel):
    database: str
    last_ingestion_status: str | None
    last_price_date: date | None = None
