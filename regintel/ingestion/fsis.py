"""USDA FSIS meat, poultry and egg recall source."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from regintel.core.errors import SourceFetchError
from regintel.core.logging import get_logger
from regintel.schemas.records import FSISRecord
from .base import BaseSource

log = get_logger("ingestion.fsis")

FSIS_API_URL = "https://www.fsis.usda.gov/fsis/api/recall/v/1"
FSIS_RSS_URL = "https://www.fsis.usda.gov/recalls-alerts/rss.xml"


class FSISRecallSource(BaseSource):
    """Recalls from the FSIS JSON API, falling back to the public RSS feed."""

    name = "FSIS"
    origin = "recalls"

    async def fetch(self, days_back: int) -> List[FSISRecord]:
        start, _ = self.window(days_back)
        try:
            items = await self._fetch_api()
            origin = "api"
        except (httpx.HTTPError, ValueError, SourceFetchError) as exc:
            log.warning(f"FSIS API unavailable ({exc}); falling back to RSS")
            items = await self._get_feed(FSIS_RSS_URL)
            origin = "rss"

        records: List[FSISRecord] = []
        for item in items:
            published = item.get("field_recall_date") or item.get("pubDate")
            if not self.within_window(published, start):
                continue
            records.append(FSISRecord(origin=origin, payload=item))

        log.info(f"Fetched {len(records)} records from FSIS {origin} ({len(items)} before windowing)")
        return records

    async def _fetch_api(self) -> List[Dict[str, Any]]:
        data = await self._get_json(FSIS_API_URL)
        if not isinstance(data, list):
            raise SourceFetchError(f"unexpected FSIS API payload: {type(data).__name__}")
        return [item for item in data if isinstance(item, dict)]
