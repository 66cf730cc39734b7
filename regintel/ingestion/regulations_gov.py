"""Regulations.gov v4 documents API source."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from regintel.core.errors import SourceConfigurationError
from regintel.core.logging import get_logger
from regintel.schemas.records import RegulationsGovRecord
from .base import BaseSource

log = get_logger("ingestion.regulations_gov")

REGULATIONS_GOV_URL = "https://api.regulations.gov/v4/documents"
REGULATIONS_GOV_PAGE_SIZE = 100

DEFAULT_AGENCY_IDS = ("FDA", "EPA", "APHIS", "FSIS")


class RegulationsGovSource(BaseSource):
    """Documents posted to Regulations.gov by the agencies we track."""

    name = "REGULATIONS_GOV"
    origin = "documents"

    def __init__(self, client, settings, agency_ids: Sequence[str] = DEFAULT_AGENCY_IDS):
        super().__init__(client, settings)
        self.agency_ids = tuple(agency_ids)

    async def fetch(self, days_back: int) -> List[RegulationsGovRecord]:
        api_key = self.settings.REGULATIONS_GOV_API_KEY
        if not api_key:
            raise SourceConfigurationError("REGULATIONS_GOV_API_KEY is not configured")

        start, _ = self.window(days_back)
        params: Dict[str, Any] = {
            "filter[agencyId]": ",".join(self.agency_ids),
            "filter[postedDate][ge]": f"{start:%Y-%m-%d}",
            "sort": "-postedDate",
            "page[size]": REGULATIONS_GOV_PAGE_SIZE,
        }
        data = await self._get_json(REGULATIONS_GOV_URL, params=params, headers={"X-API-Key": api_key})
        documents = (data.get("data") or []) if isinstance(data, dict) else []
        records = [RegulationsGovRecord(origin=self.origin, payload=doc) for doc in documents if isinstance(doc, dict)]
        log.info(f"Fetched {len(records)} documents from Regulations.gov")
        return records
