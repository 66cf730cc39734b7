"""Health routes - System health and readiness checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.orm import Session

from regintel.api.deps import get_db
from regintel.schemas.api import HealthResponse
from regintel.services.data_service import DataService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health(response: Response, db: Session = Depends(get_db)):
    """
    Health check endpoint for load balancer and Docker health checks.

    Checks database connectivity and the status of the most recent sync run.
    Returns 503 if database is unreachable.
    """
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        response.status_code = 503
        return HealthResponse(database=f"down: {e}", last_sync_status=None)

    last_run = DataService(db).get_latest_sync_log()
    return HealthResponse(
        database="ok",
        last_sync_status=last_run.status if last_run else None,
    )


@router.get("/ready")
def readiness(response: Response, db: Session = Depends(get_db)):
    """
    Readiness probe - checks if service can serve traffic.

    Returns 200 if ready, 503 if database is unreachable.
    """
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
    except Exception as e:
        response.status_code = 503
        return {"status": "not_ready", "error": str(e), "timestamp": datetime.now(timezone.utc).isoformat()}
