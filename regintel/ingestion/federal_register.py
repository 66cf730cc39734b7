"""Federal Register documents API source."""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from regintel.core.logging import get_logger
from regintel.schemas.records import FederalRegisterRecord
from .base import BaseSource

log = get_logger("ingestion.federal_register")

FEDERAL_REGISTER_URL = "https://www.federalregister.gov/api/v1/documents.json"
FEDERAL_REGISTER_PER_PAGE = 100

DEFAULT_AGENCIES = (
    "food-and-drug-administration",
    "environmental-protection-agency",
    "animal-and-plant-health-inspection-service",
    "food-safety-and-inspection-service",
)
DOCUMENT_TYPES = ("RULE", "PRORULE", "NOTICE")

FIELDS = (
    "document_number",
    "title",
    "abstract",
    "type",
    "html_url",
    "pdf_url",
    "publication_date",
    "agencies",
)


class FederalRegisterSource(BaseSource):
    """Rules, proposed rules and notices from the agencies we track."""

    name = "FEDERAL_REGISTER"
    origin = "documents"

    def __init__(self, client, settings, agencies: Sequence[str] = DEFAULT_AGENCIES):
        super().__init__(client, settings)
        self.agencies = tuple(agencies)

    async def fetch(self, days_back: int) -> List[FederalRegisterRecord]:
        start, _ = self.window(days_back)
        params: List[Tuple[str, Any]] = [
            ("per_page", FEDERAL_REGISTER_PER_PAGE),
            ("order", "newest"),
            ("conditions[publication_date][gte]", f"{start:%Y-%m-%d}"),
        ]
        params.extend(("conditions[agencies][]", agency) for agency in self.agencies)
        params.extend(("conditions[type][]", doc_type) for doc_type in DOCUMENT_TYPES)
        params.extend(("fields[]", field) for field in FIELDS)

        data = await self._get_json(FEDERAL_REGISTER_URL, params=params)
        results = (data.get("results") or []) if isinstance(data, dict) else []
        records = [FederalRegisterRecord(origin=self.origin, payload=doc) for doc in results if isinstance(doc, dict)]
        log.info(f"Fetched {len(records)} documents from the Federal Register")
        return records
