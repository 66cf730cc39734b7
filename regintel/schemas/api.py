from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from regintel.schemas.alerts import Severity
from regintel.schemas.sync import SyncResult


class AlertOut(BaseModel):
    """Stored alert as served by the read API."""

    id: UUID
    source: str
    external_id: str
    title: str
    summary: str
    link_url: Optional[str] = None
    date_published: datetime
    date_updated: Optional[datetime] = None
    jurisdiction: str
    locations: list[str]
    product_types: list[str]
    category: str
    severity: Severity
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AlertDetailOut(AlertOut):
    raw: dict
    hash: str


class AlertListResponse(BaseModel):
    request_id: str
    api_latency_ms: int
    total_count: int
    data: list[AlertOut]


class HealthResponse(BaseModel):
    database: str
    last_sync_status: str | None


class RunAllResponse(BaseModel):
    success: bool
    results: list[SyncResult]
