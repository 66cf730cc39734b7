"""Data Service - Query logic for alert endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from regintel.core.logging import get_logger
from regintel.models.alerts import Alert
from regintel.models.sync_logs import AlertSyncLog

log = get_logger("data_service")


class DataService:
    """Handles all alert query operations - reads from DB only, no writes."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        stmt,
        source: Optional[str] = None,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        q: Optional[str] = None,
        days: Optional[int] = None,
    ):
        if source:
            stmt = stmt.where(Alert.source == source.upper())
        if severity:
            stmt = stmt.where(Alert.severity == severity)
        if category:
            stmt = stmt.where(Alert.category == category)
        if q:
            pattern = f"%{q}%"
            stmt = stmt.where(or_(Alert.title.ilike(pattern), Alert.summary.ilike(pattern)))
        if days is not None:
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
            stmt = stmt.where(Alert.date_published >= cutoff)
        return stmt

    def get_alerts(
        self,
        source: Optional[str] = None,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        q: Optional[str] = None,
        days: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Alert]:
        """Newest alerts first, with optional filtering."""
        stmt = self._filtered(select(Alert), source, severity, category, q, days)
        stmt = stmt.order_by(Alert.date_published.desc(), Alert.id).limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def get_alert_count(
        self,
        source: Optional[str] = None,
        severity: Optional[str] = None,
        category: Optional[str] = None,
        q: Optional[str] = None,
        days: Optional[int] = None,
    ) -> int:
        stmt = self._filtered(select(func.count()).select_from(Alert), source, severity, category, q, days)
        return self.db.execute(stmt).scalar() or 0

    def get_alert_by_id(self, alert_id: str) -> Optional[Alert]:
        try:
            uid = uuid.UUID(alert_id)
        except ValueError:
            log.debug(f"Rejected malformed alert id: {alert_id}")
            return None
        return self.db.get(Alert, uid)

    def get_latest_sync_log(self) -> Optional[AlertSyncLog]:
        """Most recent sync run of any source."""
        stmt = select(AlertSyncLog).order_by(AlertSyncLog.run_started.desc()).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()
