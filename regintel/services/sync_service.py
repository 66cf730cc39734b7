"""Alert sync orchestration for every regulatory source."""

from __future__ import annotations

from typing import Awaitable, Callable, Dict, List, Literal, Optional, Sequence, get_args

import httpx

from regintel.core.config import Settings
from regintel.core.logging import get_logger
from regintel.core.settled import gather_settled
from regintel.ingestion import (
    BaseSource,
    CDCAdvisorySource,
    CDCOutbreakSource,
    EPAEnforcementSource,
    FederalRegisterSource,
    FSISRecallSource,
    OpenFDADrugEventSource,
    OpenFDADrugShortageSource,
    OpenFDAEnforcementSource,
    RegulationsGovSource,
)
from regintel.normalization import map_record, validate_alert
from regintel.schemas.records import SourceRecord
from regintel.schemas.sync import BatchOutcome, SyncLogOut, SyncResult, SyncStatus
from regintel.services.alert_store import AlertStore

log = get_logger("sync_service")

SourceName = Literal["FDA", "FSIS", "CDC", "EPA", "FEDERAL_REGISTER", "REGULATIONS_GOV"]

SOURCE_NAMES: tuple[str, ...] = get_args(SourceName)

# Sources covered by sync_all_sources, in result order
CORE_SOURCES: tuple[str, ...] = ("FDA", "FSIS", "CDC", "EPA")


def build_default_sources(settings: Settings, client: httpx.AsyncClient) -> Dict[str, List[BaseSource]]:
    """Standard adapter set, keyed by source name."""
    fda: List[BaseSource] = [OpenFDAEnforcementSource(client, settings, product) for product in ("food", "drug", "device")]
    if settings.FDA_INCLUDE_DRUG_EVENTS:
        fda.append(OpenFDADrugEventSource(client, settings))
    if settings.FDA_INCLUDE_DRUG_SHORTAGES:
        fda.append(OpenFDADrugShortageSource(client, settings))

    return {
        "FDA": fda,
        "FSIS": [FSISRecallSource(client, settings)],
        "CDC": [CDCOutbreakSource(client, settings), CDCAdvisorySource(client, settings)],
        "EPA": [EPAEnforcementSource(client, settings)],
        "FEDERAL_REGISTER": [FederalRegisterSource(client, settings)],
        "REGULATIONS_GOV": [RegulationsGovSource(client, settings)],
    }


class AlertSyncService:
    """Fetches, normalizes and upserts alerts, one sync log per source run.

    Responsibilities:
    - Fan out over a source's adapters; a failing adapter never sinks the others
    - Map and validate records, then upsert them in sequential batches
    - Account inserted/updated/skipped per run and close the sync log
    - Never raise out of a sync_* call; every failure becomes an error string
    """

    def __init__(
        self,
        store: AlertStore,
        sources: Dict[str, Sequence[BaseSource]],
        batch_size: int = 50,
        days_back: int = 30,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self.sources = sources
        self.batch_size = batch_size
        self.days_back = days_back

    async def sync_all_sources(self, days_back: Optional[int] = None) -> List[SyncResult]:
        """Sync FDA, FSIS, CDC and EPA concurrently; always one result per source."""
        days = self._days(days_back)
        log.info(f"Starting sync for all sources | days_back={days}")

        outcomes = await gather_settled(
            self.sync_fda_data(days),
            self.sync_fsis_data(days),
            self.sync_cdc_data(days),
            self.sync_epa_data(days),
        )

        results: List[SyncResult] = []
        for source, outcome in zip(CORE_SOURCES, outcomes):
            if outcome.ok and outcome.value is not None:
                results.append(outcome.value)
            else:
                log.error(f"{source} sync rejected: {outcome.reason}")
                results.append(SyncResult.failed(source, f"{source} sync failed: {outcome.reason}"))

        inserted = sum(r.alerts_inserted for r in results)
        updated = sum(r.alerts_updated for r in results)
        log.info(f"Sync finished for all sources | inserted={inserted} updated={updated}")
        return results

    async def sync_fda_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("FDA", days_back)

    async def sync_fsis_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("FSIS", days_back)

    async def sync_cdc_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("CDC", days_back)

    async def sync_epa_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("EPA", days_back)

    async def sync_federal_register_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("FEDERAL_REGISTER", days_back)

    async def sync_regulations_gov_data(self, days_back: Optional[int] = None) -> SyncResult:
        return await self._sync("REGULATIONS_GOV", days_back)

    async def sync_source(self, source: str, days_back: Optional[int] = None) -> SyncResult:
        """Run the sync method registered for ``source``."""
        runners: Dict[str, Callable[[Optional[int]], Awaitable[SyncResult]]] = {
            "FDA": self.sync_fda_data,
            "FSIS": self.sync_fsis_data,
            "CDC": self.sync_cdc_data,
            "EPA": self.sync_epa_data,
            "FEDERAL_REGISTER": self.sync_federal_register_data,
            "REGULATIONS_GOV": self.sync_regulations_gov_data,
        }
        runner = runners.get(source.upper())
        if runner is None:
            raise ValueError(f"Unsupported source: {source}")
        return await runner(days_back)

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------
    async def get_sync_status(self) -> SyncStatus:
        """Alert totals from the summary view plus the last successful run time."""
        rows = await self.store.alerts_summary()
        by_source: Dict[str, int] = {}
        total: Optional[int] = None
        recent = 0
        for row in rows:
            if row["source"] == "ALL":
                total = int(row["total_alerts"] or 0)
                recent = int(row["recent_alerts"] or 0)
            else:
                by_source[row["source"]] = int(row["total_alerts"] or 0)

        return SyncStatus(
            last_sync_time=await self.store.last_completed_sync(),
            total_alerts=total if total is not None else sum(by_source.values()),
            alerts_by_source=by_source,
            recent_alerts=recent,
        )

    async def get_recent_sync_logs(self, limit: int = 10) -> List[SyncLogOut]:
        return await self.store.recent_sync_logs(limit)

    # -------------------------------------------------------------------------
    # Per-source run
    # -------------------------------------------------------------------------
    def _days(self, days_back: Optional[int]) -> int:
        days = self.days_back if days_back is None else days_back
        return max(int(days), 0)

    async def _sync(self, source: str, days_back: Optional[int]) -> SyncResult:
        days = self._days(days_back)
        slog = get_logger(f"sync.{source.lower()}")
        result = SyncResult(source=source, metadata={"days_back": days})

        try:
            log_id = await self.store.start_sync_log(source)
        except Exception as exc:  # noqa: BLE001
            slog.error(f"Failed to start sync log for {source}: {exc}")
            result.errors.append(f"Failed to start sync log: {exc}")
            return result.finalize()

        slog.info(f"Starting {source} sync | days_back={days} log_id={log_id}")
        aborted = False
        try:
            records = await self._fetch(source, days, result)
            result.alerts_fetched = len(records)

            batches = [records[i : i + self.batch_size] for i in range(0, len(records), self.batch_size)]
            result.metadata["batches"] = len(batches)
            for batch in batches:
                outcome = await self._process_batch(source, batch)
                result.alerts_inserted += outcome.inserted
                result.alerts_updated += outcome.updated
                result.alerts_skipped += outcome.skipped
                result.errors.extend(outcome.errors)
        except Exception as exc:  # noqa: BLE001
            slog.exception(f"{source} sync failed: {exc}")
            result.errors.append(f"{source} sync failed: {exc}")
            aborted = True

        self._close(result, aborted)

        try:
            await self.store.finish_sync_log(
                log_id,
                result.status,
                fetched=result.alerts_fetched,
                inserted=result.alerts_inserted,
                updated=result.alerts_updated,
                skipped=result.alerts_skipped,
                errors=result.errors,
                metadata=result.metadata,
            )
        except Exception as exc:  # noqa: BLE001
            slog.error(f"Failed to finish sync log {log_id}: {exc}")
            result.errors.append(f"Failed to finish sync log: {exc}")
            self._close(result, aborted)

        slog.info(
            f"{source} sync {result.status} | fetched={result.alerts_fetched} "
            f"inserted={result.alerts_inserted} updated={result.alerts_updated} "
            f"skipped={result.alerts_skipped} errors={len(result.errors)}"
        )
        return result

    @staticmethod
    def _close(result: SyncResult, aborted: bool) -> None:
        result.finalize()
        if aborted:
            result.success = False
            result.status = "failed"

    async def _fetch(self, source: str, days: int, result: SyncResult) -> List[SourceRecord]:
        """Fetch every adapter of ``source`` concurrently; failures become errors."""
        adapters = list(self.sources.get(source, []))
        outcomes = await gather_settled(*(adapter.fetch(days) for adapter in adapters))

        records: List[SourceRecord] = []
        per_origin: Dict[str, int] = {}
        for adapter, outcome in zip(adapters, outcomes):
            if outcome.ok:
                fetched = list(outcome.value or [])
                per_origin[adapter.label] = len(fetched)
                records.extend(fetched)
            else:
                log.error(f"{adapter.label} fetch failed: {outcome.reason}")
                result.errors.append(f"{adapter.label}: {outcome.reason}")
        result.metadata["fetched_by_endpoint"] = per_origin
        return records

    async def _process_batch(self, source: str, batch: Sequence[SourceRecord]) -> BatchOutcome:
        """Map, validate and upsert records in order. One bad record never stops the batch."""
        outcome = BatchOutcome()
        for record in batch:
            try:
                alert = validate_alert(map_record(record))
            except Exception as exc:  # noqa: BLE001
                outcome.errors.append(f"{source} mapping/validation error: {exc}")
                outcome.skipped += 1
                continue

            try:
                action = await self.store.upsert_alert(alert)
            except Exception as exc:  # noqa: BLE001
                log.warning(f"{source} upsert failed for {alert.external_id}: {exc}")
                outcome.errors.append(f"{source} upsert error: {exc}")
                outcome.skipped += 1
                continue

            if action == "inserted":
                outcome.inserted += 1
            elif action == "updated":
                outcome.updated += 1
            else:
                outcome.skipped += 1
        return outcome
