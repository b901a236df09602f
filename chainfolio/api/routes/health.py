"""Health routes - System health and readiness checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from chainfolio.api.deps import get_db
from chainfolio.models.runs import IngestionRun
from chainfolio.schemas.api import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health(response: Response, db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint for load balancer and Docker health checks.

    Checks database connectivity and last ingestion run status.
    Returns 503 if database is unreachable.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        response.status_code = 503
        return HealthResponse(database=f"down: {e}", last_ingestion_status=None)

    stmt = select(IngestionRun).order_by(IngestionRun.started_at.desc()).limit(1)
    last_run = (await db.execute(stmt)).scalar_one_or_none()

    return HealthResponse(
        database="ok",
        last_ingestion_status=last_run.status if last_run else None,
        last_price_date=last_run.price_date if last_run else None,
    )


@router.get("/ready")
async def readiness(response: Response, db: AsyncSession = Depends(get_db)):
    """
    Kubernetes/ELB readiness probe - checks if service can serve traffic.

    Returns 200 if ready, 503 if database is unreachable.
    """
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
    except SQLAlchemyError as e:
        response.status_code = 503
        return {"status": "not_ready", "error": str(e), "timestamp": datetime.now(timezone.utc).isoformat()}
