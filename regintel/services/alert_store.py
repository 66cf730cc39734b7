"""Persistence contract for the sync pipeline and its Postgres implementation."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol
from uuid import UUID

from sqlalchemy import literal_column, select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from regintel.models.alerts import Alert
from regintel.models.sync_logs import AlertSyncLog
from regintel.normalization.text import parse_date
from regintel.schemas.alerts import NormalizedAlert
from regintel.schemas.sync import SyncLogOut

UpsertAction = Literal["inserted", "updated", "skipped"]

# Columns rewritten when an existing row's hash changes
_UPDATABLE_COLUMNS = (
    "title",
    "summary",
    "link_url",
    "date_published",
    "date_updated",
    "jurisdiction",
    "locations",
    "product_types",
    "category",
    "severity",
    "raw",
    "hash",
)


def build_upsert_statement(alert: NormalizedAlert):
    """Insert, or update only when the content hash changed.

    ``xmax = 0`` holds for freshly inserted tuples; when the WHERE guard
    suppresses the update, no row comes back at all.
    """
    row = {
        "source": alert.source,
        "external_id": alert.external_id,
        "title": alert.title,
        "summary": alert.summary,
        "link_url": alert.link_url,
        "date_published": parse_date(alert.date_published) or datetime.now(timezone.utc),
        "date_updated": parse_date(alert.date_updated),
        "jurisdiction": alert.jurisdiction,
        "locations": alert.locations,
        "product_types": alert.product_types,
        "category": alert.category,
        "severity": alert.severity,
        "raw": alert.raw,
        "hash": alert.hash,
    }
    stmt = insert(Alert).values(**row)
    set_ = {name: stmt.excluded[name] for name in _UPDATABLE_COLUMNS}
    set_["updated_at"] = datetime.now(timezone.utc)
    return stmt.on_conflict_do_update(
        index_elements=[Alert.source, Alert.external_id],
        set_=set_,
        where=Alert.hash.is_distinct_from(stmt.excluded.hash),
    ).returning(literal_column("(xmax = 0)").label("inserted"))


class AlertStore(Protocol):
    """What the orchestrator needs from storage. Every call is independent."""

    async def start_sync_log(self, source: str) -> str: ...

    async def finish_sync_log(
        self,
        log_id: str,
        status: str,
        *,
        fetched: int,
        inserted: int,
        updated: int,
        skipped: int,
        errors: List[str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None: ...

    async def upsert_alert(self, alert: NormalizedAlert) -> str: ...

    async def alerts_summary(self) -> List[Dict[str, Any]]: ...

    async def last_completed_sync(self) -> Optional[datetime]: ...

    async def recent_sync_logs(self, limit: int = 10) -> List[SyncLogOut]: ...


class SqlAlertStore:
    """``AlertStore`` on Postgres via SQLAlchemy.

    Each call runs in a worker thread on its own short-lived session with one
    statement and one commit, so concurrent source syncs never share a session.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    # -------------------------------------------------------------------------
    # Sync logs
    # -------------------------------------------------------------------------
    async def start_sync_log(self, source: str) -> str:
        return await asyncio.to_thread(self._start_sync_log, source)

    def _start_sync_log(self, source: str) -> str:
        with self.session_factory() as session:
            entry = AlertSyncLog(source=source, status="running", errors=[], run_started=datetime.now(timezone.utc))
            session.add(entry)
            session.commit()
            return str(entry.id)

    async def finish_sync_log(
        self,
        log_id: str,
        status: str,
        *,
        fetched: int,
        inserted: int,
        updated: int,
        skipped: int,
        errors: List[str],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        values = {
            "status": status,
            "alerts_fetched": fetched,
            "alerts_inserted": inserted,
            "alerts_updated": updated,
            "alerts_skipped": skipped,
            "errors": list(errors),
            "meta": metadata or {},
            "run_finished": datetime.now(timezone.utc),
        }
        await asyncio.to_thread(self._finish_sync_log, log_id, values)

    def _finish_sync_log(self, log_id: str, values: Dict[str, Any]) -> None:
        with self.session_factory() as session:
            entry = session.get(AlertSyncLog, UUID(str(log_id)))
            if entry is None:
                raise LookupError(f"Sync log {log_id} not found")
            for key, value in values.items():
                setattr(entry, key, value)
            session.commit()

    async def last_completed_sync(self) -> Optional[datetime]:
        return await asyncio.to_thread(self._last_completed_sync)

    def _last_completed_sync(self) -> Optional[datetime]:
        stmt = (
            select(AlertSyncLog.run_finished)
            .where(AlertSyncLog.status.in_(("completed", "partial")))
            .where(AlertSyncLog.run_finished.is_not(None))
            .order_by(AlertSyncLog.run_finished.desc())
            .limit(1)
        )
        with self.session_factory() as session:
            return session.execute(stmt).scalar_one_or_none()

    async def recent_sync_logs(self, limit: int = 10) -> List[SyncLogOut]:
        return await asyncio.to_thread(self._recent_sync_logs, limit)

    def _recent_sync_logs(self, limit: int) -> List[SyncLogOut]:
        stmt = select(AlertSyncLog).order_by(AlertSyncLog.run_started.desc()).limit(limit)
        with self.session_factory() as session:
            return [SyncLogOut.model_validate(row) for row in session.execute(stmt).scalars().all()]

    # -------------------------------------------------------------------------
    # Alerts
    # -------------------------------------------------------------------------
    async def upsert_alert(self, alert: NormalizedAlert) -> str:
        return await asyncio.to_thread(self._upsert_alert, alert)

    def _upsert_alert(self, alert: NormalizedAlert) -> UpsertAction:
        with self.session_factory() as session:
            result = session.execute(build_upsert_statement(alert)).first()
            session.commit()

        if result is None:
            return "skipped"
        return "inserted" if result.inserted else "updated"

    async def alerts_summary(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._alerts_summary)

    def _alerts_summary(self) -> List[Dict[str, Any]]:
        stmt = text("SELECT source, total_alerts, recent_alerts FROM alerts_summary")
        with self.session_factory() as session:
            return [dict(row) for row in session.execute(stmt).mappings().all()]
