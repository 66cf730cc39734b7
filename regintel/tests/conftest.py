"""Shared fakes for pipeline tests"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from regintel.core.config import Settings
from regintel.ingestion.base import BaseSource
from regintel.schemas.alerts import NormalizedAlert
from regintel.schemas.records import FDARecord
from regintel.schemas.sync import SyncLogOut


class FakeStore:
    """In-memory AlertStore keyed on (source, external_id), hash-guarded like the SQL upsert."""

    def __init__(self, fail_start: bool = False, fail_upsert_ids: Optional[set] = None):
        self.fail_start = fail_start
        self.fail_upsert_ids = fail_upsert_ids or set()
        self.rows: Dict[tuple, str] = {}
        self.logs: Dict[str, Dict[str, Any]] = {}
        self.upserted: List[NormalizedAlert] = []
        self.scripted_actions: List[str] = []

    async def start_sync_log(self, source: str) -> str:
        if self.fail_start:
            raise RuntimeError("connection refused")
        log_id = str(uuid.uuid4())
        self.logs[log_id] = {"source": source, "status": "running", "run_started": datetime.now(timezone.utc)}
        return log_id

    async def finish_sync_log(self, log_id, status, *, fetched, inserted, updated, skipped, errors, metadata=None):
        self.logs[log_id].update(
            status=status,
            alerts_fetched=fetched,
            alerts_inserted=inserted,
            alerts_updated=updated,
            alerts_skipped=skipped,
            errors=list(errors),
            run_finished=datetime.now(timezone.utc),
        )

    async def upsert_alert(self, alert: NormalizedAlert) -> str:
        if alert.external_id in self.fail_upsert_ids:
            raise RuntimeError("deadlock detected")
        self.upserted.append(alert)
        if self.scripted_actions:
            return self.scripted_actions.pop(0)
        key = (alert.source, alert.external_id)
        previous = self.rows.get(key)
        self.rows[key] = alert.hash
        if previous is None:
            return "inserted"
        if previous != alert.hash:
            return "updated"
        return "skipped"

    async def alerts_summary(self) -> List[Dict[str, Any]]:
        counts: Dict[str, int] = {}
        for source, _ in self.rows:
            counts[source] = counts.get(source, 0) + 1
        rows = [{"source": s, "total_alerts": c, "recent_alerts": c} for s, c in counts.items()]
        rows.append({"source": "ALL", "total_alerts": len(self.rows), "recent_alerts": len(self.rows)})
        return rows

    async def last_completed_sync(self) -> Optional[datetime]:
        finished = [
            entry["run_finished"] for entry in self.logs.values() if entry["status"] in ("completed", "partial")
        ]
        return max(finished) if finished else None

    async def recent_sync_logs(self, limit: int = 10) -> List[SyncLogOut]:
        entries = sorted(self.logs.items(), key=lambda kv: kv[1]["run_started"], reverse=True)[:limit]
        return [SyncLogOut(id=log_id, **entry) for log_id, entry in entries]


class FakeSource(BaseSource):
    """Adapter double returning canned records or raising a canned error."""

    def __init__(self, name: str, origin: str, records: Optional[List[Any]] = None, error: Optional[Exception] = None):
        self.name = name
        self.origin = origin
        self.records = records or []
        self.error = error
        self.calls: List[int] = []

    async def fetch(self, days_back: int) -> List[Any]:
        self.calls.append(days_back)
        if self.error is not None:
            raise self.error
        return list(self.records)


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def fda_item(recall_number: str, classification: str = "Class II", **overrides: Any) -> Dict[str, Any]:
    item = {
        "recall_number": recall_number,
        "event_id": "93012",
        "classification": classification,
        "product_description": "Organic peanut butter, 16 oz jars",
        "reason_for_recall": "Potential Salmonella contamination",
        "recalling_firm": "Acme Foods",
        "report_date": "20261001",
        "recall_initiation_date": "20260920",
        "state": "CA",
        "distribution_pattern": "Distributed in CA, NV and OR",
        "country": "United States",
        "status": "Ongoing",
    }
    item.update(overrides)
    return item


def fda_records(prefix: str, count: int, origin: str = "food") -> List[FDARecord]:
    return [FDARecord(origin=origin, payload=fda_item(f"{prefix}-{i:04d}-2026")) for i in range(count)]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        OPENFDA_API_KEY=None,
        EPA_ECHO_API_KEY=None,
        REGULATIONS_GOV_API_KEY=None,
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()
