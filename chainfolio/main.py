from pathlib import Path
from contextlib import asynccontextmanager
import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chainfolio.api.routes import health_router, holdings_router, portfolio_router, prices_router
from chainfolio.core.config import settings
from chainfolio.core.db import SessionLocal
from chainfolio.core.errors import ChainfolioError, ValidationError
from chainfolio.core.logging import get_logger
from chainfolio.services.ingestion_service import IngestionService


log = get_logger("app")

# Background task handle
_ingestion_task: Optional[asyncio.Task] = None


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


def seconds_until_next_run(now: datetime, hour_utc: int) -> float:
    """Seconds from ``now`` until the next ``hour_utc``:00 UTC."""
    now = now.astimezone(timezone.utc)
    next_run = now.replace(hour=hour_utc, minute=0, second=0, microsecond=0)
    if next_run <= now:
        next_run += timedelta(days=1)
    return (next_run - now).total_seconds()


async def run_price_ingestion() -> None:
    """Append today's price for every asset; errors are logged, never raised."""
    log.info("Starting daily price ingestion...")
    async with SessionLocal() as db:
        try:
            service = IngestionService(db, SessionLocal)
            report = await service.run()
            if report.success:
                log.info(f"Daily price ingestion completed: {len(report.created)} new, {len(report.duplicates)} duplicate")
            else:
                log.error(f"Daily price ingestion partial: failed assets {sorted(report.failed)}")
        except Exception as exc:
            log.exception(f"Daily price ingestion failed: {exc}")


async def scheduled_ingestion_task() -> None:
    """Background task that runs ingestion once a day at INGESTION_HOUR_UTC."""
    hour = settings.INGESTION_HOUR_UTC
    log.info(f"Scheduled price ingestion started (daily at {hour:02d}:00 UTC)")

    while True:
        try:
            delay = seconds_until_next_run(datetime.now(timezone.utc), hour)
            log.debug(f"Next price ingestion in {delay:.0f}s")
            await asyncio.sleep(delay)
            await run_price_ingestion()
        except asyncio.CancelledError:
            log.info("Scheduled price ingestion cancelled")
            break


async def chainfolio_error_handler(request: Request, exc: ChainfolioError) -> JSONResponse:
    content = {"detail": exc.message}
    if isinstance(exc, ValidationError):
        content["rule"] = exc.rule
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _ingestion_task

    # Log environment mode
    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if settings.is_production:
        log.info("Production mode: Debug disabled, docs disabled, stricter logging")
    else:
        log.info("Development mode: Debug enabled, docs available")

    # Startup; env.py drives an async engine, so keep it off the event loop
    try:
        await asyncio.to_thread(run_migrations)
    except Exception:
        log.exception("Failed to apply migrations on startup")
        raise

    if settings.INGESTION_ENABLED:
        log.info("Starting scheduled price ingestion background task...")
        _ingestion_task = asyncio.create_task(scheduled_ingestion_task())
    else:
        log.info("Scheduled price ingestion is disabled (INGESTION_ENABLED=false)")

    yield

    # Shutdown
    log.info("Shutting down services...")

    if _ingestion_task:
        log.info("Cancelling scheduled price ingestion task...")
        _ingestion_task.cancel()
        try:
            await _ingestion_task
        except asyncio.CancelledError:
            pass
        _ingestion_task = None

    log.info("Application shutdown complete")


# Configure FastAPI based on environment
app = FastAPI(
    title="Chainfolio",
    description="On-chain asset valuation and portfolio performance",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production for security
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    # Debug mode only in development
    debug=settings.debug_enabled,
)

app.add_exception_handler(ChainfolioError, chainfolio_error_handler)

app.include_router(holdings_router)
app.include_router(portfolio_router)
app.include_router(prices_router)
app.include_router(health_router)
