"""Sync run results and status reporting."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

SyncStatusLabel = Literal["completed", "partial", "failed"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncResult(BaseModel):
    """Outcome of one source's sync run. Mutated while batches are processed."""

    source: str
    success: bool = False
    status: SyncStatusLabel = "failed"
    start_time: datetime = Field(default_factory=_utcnow)
    end_time: datetime = Field(default_factory=_utcnow)
    alerts_fetched: int = 0
    alerts_inserted: int = 0
    alerts_updated: int = 0
    alerts_skipped: int = 0
    errors: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def finalize(self) -> "SyncResult":
        """Derive ``success`` and ``status`` from the accumulated counts."""
        wrote = self.alerts_inserted > 0 or self.alerts_updated > 0
        self.success = not self.errors or wrote
        if not self.errors:
            self.status = "completed"
        elif self.success:
            self.status = "partial"
        else:
            self.status = "failed"
        self.end_time = _utcnow()
        return self

    @classmethod
    def failed(cls, source: str, error: str) -> "SyncResult":
        return cls(source=source, success=False, status="failed", errors=[error])


class BatchOutcome(BaseModel):
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class SyncStatus(BaseModel):
    last_sync_time: Optional[datetime] = None
    total_alerts: int = 0
    alerts_by_source: Dict[str, int] = Field(default_factory=dict)
    recent_alerts: int = 0


class SyncLogOut(BaseModel):
    id: UUID
    source: str
    status: str
    run_started: datetime
    run_finished: Optional[datetime] = None
    alerts_fetched: int = 0
    alerts_inserted: int = 0
    alerts_updated: int = 0
    alerts_skipped: int = 0
    errors: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True
