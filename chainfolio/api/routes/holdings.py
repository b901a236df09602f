"""Holding routes - a user's assets and their price history."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from chainfolio.api.deps import get_holding_service, get_user_id
from chainfolio.repositories.base import HoldingView
from chainfolio.schemas.api import (
    AssetHistoryOut,
    CreateHoldingRequest,
    CreateHoldingResponse,
    HistoryEntryOut,
    HoldingOut,
    MessageResponse,
)
from chainfolio.services.holding_service import HoldingService, NewHolding

router = APIRouter(prefix="/assets", tags=["assets"])


def _holding_out(view: HoldingView) -> HoldingOut:
    return HoldingOut(
        id=view.holding_id,
        user_id=view.user_id,
        asset_id=view.asset_id,
        quantity=float(view.quantity) if view.quantity is not None else None,
        created_at=view.created_at,
        name=view.name,
        asset_class=view.asset_class,
        description=view.description,
        contract_address=view.contract_address,
        chain=view.chain,
        token_id=view.token_id,
        asset_created_at=view.asset_created_at,
    )


@router.post("", response_model=CreateHoldingResponse, status_code=status.HTTP_201_CREATED)
async def create_holding(
    body: CreateHoldingRequest,
    user_id: str = Depends(get_user_id),
    service: HoldingService = Depends(get_holding_service),
):
    """
    Add an asset to the user's portfolio.

    The asset is deduplicated on (contract_address, chain, asset_class);
    every call creates a new holding (separate lot) referencing it.
    """
    created = await service.create_holding(
        user_id,
        NewHolding(
            name=body.name,
            asset_class=body.asset_class,
            contract_address=body.contract_address,
            chain=body.chain.value,
            description=body.description,
            token_id=body.token_id,
            quantity=body.quantity,
        ),
    )
    return CreateHoldingResponse(message=created.message, asset_id=created.asset_id, holding_id=created.holding_id)


@router.get("", response_model=list[HoldingOut])
async def list_holdings(
    user_id: str = Depends(get_user_id),
    service: HoldingService = Depends(get_holding_service),
):
    """All holdings in the user's portfolio, merged with asset metadata."""
    return [_holding_out(view) for view in await service.list_holdings(user_id)]


@router.get("/{holding_id}", response_model=HoldingOut)
async def get_holding(
    holding_id: str,
    user_id: str = Depends(get_user_id),
    service: HoldingService = Depends(get_holding_service),
):
    return _holding_out(await service.get_holding(holding_id, user_id))


@router.delete("/{holding_id}", response_model=MessageResponse)
async def remove_holding(
    holding_id: str,
    user_id: str = Depends(get_user_id),
    service: HoldingService = Depends(get_holding_service),
):
    """Remove a holding; its asset goes too once no holding references it."""
    message = await service.remove_holding(holding_id, user_id)
    return MessageResponse(message=message)


@router.get("/{holding_id}/history", response_model=AssetHistoryOut)
async def get_holding_history(
    holding_id: str,
    start_date: Optional[date] = Query(None, alias="startDate", description="Start date (YYYY-MM-DD), inclusive"),
    end_date: Optional[date] = Query(None, alias="endDate", description="End date (YYYY-MM-DD), inclusive"),
    user_id: str = Depends(get_user_id),
    service: HoldingService = Depends(get_holding_service),
):
    """
    Daily valuation and PnL series for one holding.

    Monetary values are rounded to whole units; percentages are relative to
    the first price in range and do not depend on quantity.
    """
    result = await service.get_holding_history(holding_id, user_id, start_date, end_date)
    return AssetHistoryOut(
        history=[
            HistoryEntryOut(
                date=entry.date,
                price=entry.price,
                value=entry.value,
                daily_pnl=entry.daily_pnl,
                cumulative_pnl=entry.cumulative_pnl,
                cumulative_pnl_percentage=entry.cumulative_pnl_percentage,
            )
            for entry in result.history
        ],
        quantity=result.quantity,
        overall_pnl=result.overall_pnl,
        overall_pnl_percentage=result.overall_pnl_percentage,
    )
