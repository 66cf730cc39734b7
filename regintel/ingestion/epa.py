"""EPA ECHO enforcement case source."""

from __future__ import annotations

from typing import Any, Dict, List

from regintel.core.logging import get_logger
from regintel.schemas.records import EPARecord
from .base import BaseSource

log = get_logger("ingestion.epa")

ECHO_CASES_URL = "https://echodata.epa.gov/echo/case_rest_services.get_cases"
ECHO_RESPONSE_SET = 100


class EPAEnforcementSource(BaseSource):
    """Civil and criminal enforcement cases from ECHO."""

    name = "EPA"
    origin = "enforcement"

    async def fetch(self, days_back: int) -> List[EPARecord]:
        start, end = self.window(days_back)
        params: Dict[str, Any] = {
            "output": "JSON",
            "p_activity_date_begin": f"{start:%m/%d/%Y}",
            "p_activity_date_end": f"{end:%m/%d/%Y}",
            "responseset": ECHO_RESPONSE_SET,
        }
        if self.settings.EPA_ECHO_API_KEY:
            params["api_key"] = self.settings.EPA_ECHO_API_KEY

        data = await self._get_json(ECHO_CASES_URL, params=params)
        cases = self._extract_cases(data)

        records: List[EPARecord] = []
        for case in cases:
            activity_date = case.get("SettlementDate") or case.get("DateFiled") or case.get("FiledDate")
            if not self.within_window(activity_date, start):
                continue
            records.append(EPARecord(origin=self.origin, payload=case))

        log.info(f"Fetched {len(records)} enforcement cases from EPA ECHO")
        return records

    @staticmethod
    def _extract_cases(data: Any) -> List[Dict[str, Any]]:
        """ECHO nests cases under ``Results``, as a list or as ``Results.Cases``."""
        results = data.get("Results") if isinstance(data, dict) else data
        if isinstance(results, dict):
            results = results.get("Cases") or results.get("Case") or []
        if not isinstance(results, list):
            return []
        return [case for case in results if isinstance(case, dict)]
