"""CDC outbreak investigations (data.cdc.gov) and advisory RSS feeds."""

from __future__ import annotations

from typing import Dict, List

from regintel.core.logging import get_logger
from regintel.core.settled import gather_settled
from regintel.schemas.records import CDCRecord
from .base import BaseSource

log = get_logger("ingestion.cdc")

CDC_OUTBREAKS_URL = "https://data.cdc.gov/resource/5uma-a6sb.json"
CDC_OUTBREAKS_LIMIT = 100

CDC_ADVISORY_FEEDS: Dict[str, str] = {
    "eid": "https://wwwnc.cdc.gov/eid/rss/ahead-of-print.xml",
    "mmwr": "https://www.cdc.gov/mmwr/rss.xml",
    "food_safety": "https://tools.cdc.gov/api/v2/resources/media/316422.rss",
}


class CDCOutbreakSource(BaseSource):
    """Foodborne outbreak investigations from the Socrata dataset."""

    name = "CDC"
    origin = "outbreaks"

    async def fetch(self, days_back: int) -> List[CDCRecord]:
        start, _ = self.window(days_back)
        params = {
            "$where": f"investigation_start_date >= '{start:%Y-%m-%d}'",
            "$order": "investigation_start_date DESC",
            "$limit": CDC_OUTBREAKS_LIMIT,
        }
        data = await self._get_json(CDC_OUTBREAKS_URL, params=params)
        rows = data if isinstance(data, list) else []
        records = [CDCRecord(origin=self.origin, kind="outbreak", payload=row) for row in rows if isinstance(row, dict)]
        log.info(f"Fetched {len(records)} outbreak records from CDC")
        return records


class CDCAdvisorySource(BaseSource):
    """Advisories from the CDC RSS feeds.

    Feeds are read concurrently; one dead feed does not sink the others, but
    if every feed fails the first error is raised.
    """

    name = "CDC"
    origin = "advisories"

    def __init__(self, client, settings, feeds: Dict[str, str] | None = None):
        super().__init__(client, settings)
        self.feeds = feeds if feeds is not None else dict(CDC_ADVISORY_FEEDS)

    async def fetch(self, days_back: int) -> List[CDCRecord]:
        start, _ = self.window(days_back)
        names = list(self.feeds)
        outcomes = await gather_settled(*(self._get_feed(self.feeds[n]) for n in names))

        failures = [o for o in outcomes if not o.ok]
        if outcomes and len(failures) == len(outcomes):
            raise failures[0].error  # type: ignore[misc]

        records: List[CDCRecord] = []
        for feed_name, outcome in zip(names, outcomes):
            if not outcome.ok:
                log.warning(f"CDC feed {feed_name} failed: {outcome.reason}")
                continue
            for item in outcome.value or []:
                # Items without a pubDate cannot be windowed and are kept
                if not self.within_window(item.get("pubDate"), start):
                    continue
                records.append(CDCRecord(origin=feed_name, kind="advisory", payload=item))

        log.info(f"Fetched {len(records)} advisory records from {len(names) - len(failures)} CDC feeds")
        return records
