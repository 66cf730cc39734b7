"""Alert routes - Read access to normalized alerts with request metadata."""

import time
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from regintel.api.deps import get_db
from regintel.schemas.alerts import Severity
from regintel.schemas.api import AlertDetailOut, AlertListResponse, AlertOut
from regintel.services.data_service import DataService

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
def list_alerts(
    source: Optional[str] = Query(None, description="Filter by source (FDA, FSIS, CDC, EPA, ...)"),
    severity: Optional[Severity] = Query(None, description="Filter by severity"),
    category: Optional[str] = Query(None, description="Filter by category (recall, outbreak, rule, ...)"),
    q: Optional[str] = Query(None, description="Case-insensitive match on title or summary"),
    days: Optional[int] = Query(None, ge=0, description="Only alerts published in the last N days"),
    limit: int = Query(50, ge=1, le=500, description="Number of records to return (max 500)"),
    offset: int = Query(0, ge=0, description="Number of records to skip"),
    db: Session = Depends(get_db),
):
    """
    Get normalized alerts, newest first.

    Includes request metadata (request_id, latency_ms) and the total count
    matching the filters.
    """
    start = time.perf_counter()
    request_id = str(uuid.uuid4())

    service = DataService(db)
    filters = dict(source=source, severity=severity, category=category, q=q, days=days)
    results = service.get_alerts(limit=limit, offset=offset, **filters)
    total = service.get_alert_count(**filters)

    latency_ms = int((time.perf_counter() - start) * 1000)

    return AlertListResponse(
        request_id=request_id,
        api_latency_ms=latency_ms,
        total_count=total,
        data=[AlertOut.model_validate(r) for r in results],
    )


@router.get("/count")
def count_alerts(
    source: Optional[str] = Query(None, description="Filter by source"),
    severity: Optional[Severity] = Query(None, description="Filter by severity"),
    db: Session = Depends(get_db),
):
    """Get total count of stored alerts."""
    count = DataService(db).get_alert_count(source=source, severity=severity)
    return {"count": count, "source": source, "severity": severity}


@router.get("/{alert_id}", response_model=AlertDetailOut)
def get_alert(alert_id: str, db: Session = Depends(get_db)):
    """Get a single alert, including its raw source payload."""
    result = DataService(db).get_alert_by_id(alert_id)
    if not result:
        raise HTTPException(status_code=404, detail=f"Alert '{alert_id}' not found")
    return AlertDetailOut.model_validate(result)
