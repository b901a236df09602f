"""API dependencies"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chainfolio.core.config import settings
from chainfolio.core.db import SessionLocal, get_db
from chainfolio.repositories.holdings import SqlHoldingRepository
from chainfolio.repositories.prices import SqlPriceStore
from chainfolio.services.holding_service import HoldingService
from chainfolio.services.ingestion_service import IngestionService
from chainfolio.services.portfolio_service import PortfolioService

__all__ = [
    "get_db",
    "get_session_factory",
    "get_user_id",
    "get_holding_service",
    "get_portfolio_service",
    "get_ingestion_service",
]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory for short-lived sessions (one per concurrent price read)."""
    return SessionLocal


def get_user_id(request: Request) -> str:
    """User id verified and forwarded by the upstream auth gateway."""
    user_id: Optional[str] = request.headers.get(settings.USER_ID_HEADER)
    if not user_id or not user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {settings.USER_ID_HEADER} header",
        )
    return user_id.strip()


def get_holding_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> HoldingService:
    return HoldingService(db, session_factory=session_factory)


def get_portfolio_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PortfolioService:
    return PortfolioService(SqlHoldingRepository(db), SqlPriceStore(session_factory))


def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> IngestionService:
    return IngestionService(db, session_factory)
