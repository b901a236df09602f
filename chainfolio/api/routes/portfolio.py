"""Portfolio routes - total value and PnL across a user's holdings."""

from fastapi import APIRouter, Depends

from chainfolio.api.deps import get_portfolio_service, get_user_id
from chainfolio.schemas.api import PortfolioValueOut
from chainfolio.services.portfolio_service import PortfolioService

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("", response_model=PortfolioValueOut)
async def get_portfolio_value_and_pnl(
    user_id: str = Depends(get_user_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Current value of every holding at its latest price, and PnL against
    each holding's earliest recorded price.

    Holdings without any recorded price are skipped.
    """
    result = await service.get_portfolio_value_and_pnl(user_id)
    return PortfolioValueOut(
        total_value=result.total_value,
        pnl=result.pnl,
        pnl_percentage=result.pnl_percentage,
    )
