"""Sync routes - "Sync Now" actions, run status and sync logs."""

from fastapi import APIRouter, Depends, HTTPException, Query

from regintel.api.deps import get_status_service, get_sync_service
from regintel.core.logging import get_logger
from regintel.schemas.api import RunAllResponse
from regintel.schemas.sync import SyncLogOut, SyncResult, SyncStatus
from regintel.services.sync_service import AlertSyncService, SourceName

router = APIRouter(prefix="/sync", tags=["sync"])
log = get_logger("sync_routes")


@router.post("/run/{source}", response_model=SyncResult)
async def trigger_sync(
    source: SourceName,
    days_back: int | None = Query(None, ge=0, le=3650, description="Lookback window in days"),
    service: AlertSyncService = Depends(get_sync_service),
):
    """
    Sync one source now.

    Fetches every endpoint of the source, normalizes and validates each
    record, then upserts in batches. Source failures come back as errors in
    the result rather than as an HTTP error.
    """
    log.info(f"Sync triggered for source: {source}")
    return await service.sync_source(source, days_back)


@router.post("/run-all", response_model=RunAllResponse)
async def trigger_sync_all(
    days_back: int | None = Query(None, ge=0, le=3650, description="Lookback window in days"),
    service: AlertSyncService = Depends(get_sync_service),
):
    """
    Sync FDA, FSIS, CDC and EPA concurrently.

    Always returns one result per source, in that order.
    """
    log.info("Sync triggered for all sources")
    results = await service.sync_all_sources(days_back)
    return RunAllResponse(success=all(r.success for r in results), results=results)


@router.get("/status", response_model=SyncStatus)
async def sync_status(service: AlertSyncService = Depends(get_status_service)):
    """Alert totals per source, recent alert count and the last successful sync time."""
    try:
        return await service.get_sync_status()
    except Exception as exc:
        log.error(f"Failed to load sync status: {exc}")
        raise HTTPException(status_code=503, detail="Sync status unavailable") from exc


@router.get("/logs", response_model=list[SyncLogOut])
async def sync_logs(
    limit: int = Query(10, ge=1, le=100, description="Number of runs to return"),
    service: AlertSyncService = Depends(get_status_service),
):
    """Most recent sync runs across all sources, newest first."""
    return await service.get_recent_sync_logs(limit)
