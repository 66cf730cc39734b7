from pathlib import Path
from contextlib import asynccontextmanager
import asyncio
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI

from regintel import __version__
from regintel.api.routes import alerts, health, sync
from regintel.core.config import settings
from regintel.core.db import SessionLocal
from regintel.core.logging import get_logger
from regintel.ingestion import create_client
from regintel.services.alert_store import SqlAlertStore
from regintel.services.sync_service import AlertSyncService, build_default_sources


log = get_logger("app")

# Background task handle
_sync_task: Optional[asyncio.Task] = None


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


async def run_sync_pipeline() -> None:
    """Sync all core sources once."""
    log.info("Starting sync pipeline for all sources...")
    async with create_client(settings) as client:
        service = AlertSyncService(
            SqlAlertStore(SessionLocal),
            build_default_sources(settings, client),
            batch_size=settings.SYNC_BATCH_SIZE,
            days_back=settings.SYNC_DAYS_BACK,
        )
        results = await service.sync_all_sources()

    for result in results:
        if result.success:
            log.info(
                f"Sync {result.source}: {result.status} | inserted={result.alerts_inserted} "
                f"updated={result.alerts_updated} skipped={result.alerts_skipped}"
            )
        else:
            log.error(f"Sync {result.source}: failed - {'; '.join(result.errors[:3]) or 'unknown error'}")

    log.info("Sync pipeline completed")


async def scheduled_sync_task() -> None:
    """Background task that syncs at the configured interval."""
    interval = settings.SYNC_INTERVAL_SECONDS
    log.info(f"Scheduled sync task started (interval: {interval}s)")

    while True:
        try:
            await run_sync_pipeline()
            await asyncio.sleep(interval)
        except asyncio.CancelledError:
            log.info("Scheduled sync task cancelled")
            break
        except Exception as exc:
            log.exception(f"Scheduled sync task error: {exc}")
            # Continue running despite errors
            await asyncio.sleep(interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _sync_task

    # Log environment mode
    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if settings.is_production:
        log.info("Production mode: Debug disabled, docs disabled, stricter logging")
    else:
        log.info("Development mode: Debug enabled, docs available")

    # Startup
    try:
        run_migrations()
    except Exception:
        log.exception("Failed to apply migrations on startup")
        raise

    if settings.SYNC_ENABLED:
        log.info("Starting scheduled sync background task...")
        _sync_task = asyncio.create_task(scheduled_sync_task())
    else:
        log.info("Scheduled sync is disabled (SYNC_ENABLED=false)")

    yield

    # Shutdown
    log.info("Shutting down services...")

    if _sync_task:
        log.info("Cancelling scheduled sync task...")
        _sync_task.cancel()
        try:
            await _sync_task
        except asyncio.CancelledError:
            pass
        _sync_task = None

    log.info("Application shutdown complete")


# Configure FastAPI based on environment
app = FastAPI(
    title="RegIntel Alert Sync",
    description="Regulatory alert ingestion from FDA, FSIS, CDC, EPA, the Federal Register and Regulations.gov",
    version=__version__,
    lifespan=lifespan,
    # Disable docs in production for security
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    # Debug mode only in development
    debug=settings.debug_enabled,
)


app.include_router(alerts.router)
app.include_router(health.router)
app.include_router(sync.router)
