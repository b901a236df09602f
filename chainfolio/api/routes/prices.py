"""Price routes - trigger daily ingestion and inspect past runs."""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from chainfolio.api.deps import get_ingestion_service
from chainfolio.core.logging import get_logger
from chainfolio.schemas.api import IngestionReportOut, IngestionRunOut
from chainfolio.services.ingestion_service import IngestionService

router = APIRouter(prefix="/prices", tags=["prices"])
log = get_logger("price_routes")


@router.post("/update", response_model=IngestionReportOut)
async def update_prices(service: IngestionService = Depends(get_ingestion_service)):
    """
    Append today's price point for every asset.

    Safe to call repeatedly: assets already priced today are reported as
    duplicates and left untouched. Assets whose quote or write failed are
    listed under ``failed`` and can be retried by calling again.
    """
    log.info("Price update triggered via API")
    report = await service.run()

    return IngestionReportOut(
        success=report.success,
        price_date=report.price_date,
        assets_total=report.assets_total,
        created=len(report.created),
        duplicates=len(report.duplicates),
        failed=report.failed,
    )


@router.get("/runs", response_model=list[IngestionRunOut])
async def get_ingestion_runs(
    status: Optional[Literal["running", "success", "partial", "failure"]] = Query(
        None, description="Filter by status (running, success, partial, failure)"
    ),
    limit: int = Query(10, ge=1, le=50, description="Number of runs to return"),
    service: IngestionService = Depends(get_ingestion_service),
):
    """Recent ingestion runs, newest first."""
    runs = await service.recent_runs(status=status, limit=limit)
    return [IngestionRunOut.model_validate(run) for run in runs]
