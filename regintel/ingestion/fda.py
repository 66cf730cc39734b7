"""openFDA sources: enforcement reports, drug adverse events and drug shortages."""

from __future__ import annotations

from typing import Any, Dict, List, Literal

import httpx

from regintel.core.logging import get_logger
from regintel.schemas.records import FDARecord
from .base import BaseSource

log = get_logger("ingestion.fda")

OPENFDA_BASE_URL = "https://api.fda.gov"
OPENFDA_PAGE_LIMIT = 100

FDAProduct = Literal["food", "drug", "device"]


class _OpenFDASource(BaseSource):
    """Shared openFDA request handling. A 404 means the search matched nothing."""

    name = "FDA"
    endpoint: str

    async def _search(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        params = dict(params, limit=OPENFDA_PAGE_LIMIT)
        if self.settings.OPENFDA_API_KEY:
            params["api_key"] = self.settings.OPENFDA_API_KEY

        try:
            data = await self._get_json(f"{OPENFDA_BASE_URL}/{self.endpoint}", params=params)
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                log.info(f"openFDA {self.endpoint}: no matches")
                return []
            raise

        results = (data.get("results") or []) if isinstance(data, dict) else []
        return [item for item in results if isinstance(item, dict)]


class OpenFDAEnforcementSource(_OpenFDASource):
    """Recall enforcement reports for one openFDA product family."""

    def __init__(self, client: httpx.AsyncClient, settings, product: FDAProduct):
        super().__init__(client, settings)
        self.product = product
        self.origin = product
        self.endpoint = f"{product}/enforcement.json"

    async def fetch(self, days_back: int) -> List[FDARecord]:
        start, end = self.window(days_back)
        items = await self._search(
            {
                "search": f"report_date:[{start:%Y%m%d} TO {end:%Y%m%d}]",
                "sort": "report_date:desc",
            }
        )
        records = [FDARecord(origin=self.product, payload=item) for item in items]
        log.info(f"Fetched {len(records)} records from openFDA {self.product}")
        return records


class OpenFDADrugEventSource(_OpenFDASource):
    """FAERS adverse event reports received within the window."""

    origin = "drug_event"
    endpoint = "drug/event.json"

    async def fetch(self, days_back: int) -> List[FDARecord]:
        start, end = self.window(days_back)
        items = await self._search(
            {
                "search": f"receivedate:[{start:%Y%m%d} TO {end:%Y%m%d}] AND serious:1",
                "sort": "receivedate:desc",
            }
        )
        records = [FDARecord(origin=self.origin, payload=item) for item in items]
        log.info(f"Fetched {len(records)} adverse event reports from openFDA")
        return records


class OpenFDADrugShortageSource(_OpenFDASource):
    """Drug shortage entries updated within the window.

    Shortage dates are MM/DD/YYYY strings, so the window is applied locally.
    """

    origin = "drug_shortage"
    endpoint = "drug/shortages.json"

    async def fetch(self, days_back: int) -> List[FDARecord]:
        start, _ = self.window(days_back)
        items = await self._search({"sort": "update_date:desc"})
        records = [
            FDARecord(origin=self.origin, payload=item)
            for item in items
            if self.within_window(item.get("update_date") or item.get("initial_posting_date"), start)
        ]
        log.info(f"Fetched {len(records)} drug shortage entries from openFDA")
        return records
