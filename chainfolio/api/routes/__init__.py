from chainfolio.api.routes.health import router as health_router
from chainfolio.api.routes.holdings import router as holdings_router
from chainfolio.api.routes.portfolio import router as portfolio_router
from chainfolio.api.routes.prices import router as prices_router

__all__ = ["health_router", "holdings_router", "portfolio_router", "prices_router"]
