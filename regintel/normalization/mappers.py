"""Normalization of source-native records into ``NormalizedAlert``.

Every mapper is pure and total: missing or malformed fields degrade to
defaults instead of raising. Rejection is ``validate_alert``'s job.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any, Callable, Dict, List, Optional

from regintel.normalization import severity as sev
from regintel.normalization.text import (
    as_list,
    clean_text,
    contains_keyword,
    dedupe_preserving_order,
    first_present,
    iso_or_none,
    normalize_external_id,
    state_codes,
    utcnow_iso,
)
from regintel.schemas.alerts import NormalizedAlert
from regintel.schemas.records import (
    CDCRecord,
    EPARecord,
    FDARecord,
    FederalRegisterRecord,
    FSISRecord,
    RegulationsGovRecord,
    SourceRecord,
)

TITLE_MAX_LENGTH = 500

FDA_ORIGIN_PRODUCT_TYPES = {
    "food": "Food",
    "drug": "Drug",
    "device": "Medical Device",
}

FSIS_PRODUCT_KEYWORDS = (
    (("beef", "steak", "steaks", "veal"), "Beef"),
    (("pork", "bacon", "ham", "hams", "sausage", "sausages"), "Pork"),
    (("chicken", "chickens", "poultry", "turkey", "turkeys"), "Poultry"),
    (("fish", "seafood", "siluriformes", "catfish"), "Seafood"),
    (("egg", "eggs"), "Eggs"),
)

EPA_STATUTE_MEDIA = {
    "CAA": "Air",
    "CWA": "Water",
    "SDWA": "Drinking Water",
    "RCRA": "Waste",
    "CERCLA": "Waste",
    "TSCA": "Chemical",
    "FIFRA": "Pesticides",
    "EPCRA": "Chemical",
}

_FSIS_RECALL_NUMBER_RE = re.compile(r"recall\s*(?:#|number|no\.?)?\s*(\d{3}-\d{4}|\d{3}-\d{2}-\d{4})", re.IGNORECASE)


# -----------------------------------------------------------------------------
# Hashing
# -----------------------------------------------------------------------------
def compute_alert_hash(alert: NormalizedAlert, date_basis: Optional[str]) -> str:
    """Fingerprint over the normalized content fields.

    ``date_basis`` is the date the source itself reported (updated, else
    published). Fallback timestamps are never hashed, so an unchanged upstream
    record produces the same hash on every run.
    """
    content = {
        "source": alert.source,
        "external_id": alert.external_id,
        "title": alert.title,
        "summary": alert.summary,
        "link_url": alert.link_url or "",
        "category": alert.category,
        "severity": alert.severity,
        "date": date_basis or "",
    }
    encoded = json.dumps(content, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


def _finish(alert: NormalizedAlert, published_raw: Any, updated_raw: Any) -> NormalizedAlert:
    published = iso_or_none(published_raw)
    updated = iso_or_none(updated_raw)
    alert.date_published = published or utcnow_iso()
    alert.date_updated = updated
    alert.hash = compute_alert_hash(alert, updated or published)
    return alert


def _truncate(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def _link(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) and value.strip() else None


# -----------------------------------------------------------------------------
# FDA (openFDA enforcement, adverse events, shortages)
# -----------------------------------------------------------------------------
def _dict_list(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _fda_drug_names(item: Dict[str, Any]) -> List[str]:
    patient = item.get("patient") if isinstance(item.get("patient"), dict) else {}
    names = [clean_text(drug.get("medicinalproduct")) for drug in _dict_list(patient.get("drug"))]
    return dedupe_preserving_order([n for n in names if n])


def _map_fda_event(record: FDARecord) -> NormalizedAlert:
    item = record.payload
    patient = item.get("patient") if isinstance(item.get("patient"), dict) else {}
    drugs = _fda_drug_names(item)
    reactions = dedupe_preserving_order(
        [
            clean_text(r.get("reactionmeddrapt"))
            for r in _dict_list(patient.get("reaction"))
            if r.get("reactionmeddrapt")
        ]
    )
    country = clean_text(first_present(item, "occurcountry", "primarysourcecountry"))

    alert = NormalizedAlert(
        external_id=normalize_external_id(first_present(item, "safetyreportid", "id")),
        source="FDA",
        title=_truncate(f"Adverse event report: {', '.join(drugs)}" if drugs else "FDA Adverse Event Report"),
        summary=f"Reactions: {', '.join(reactions)}" if reactions else "",
        link_url=None,
        jurisdiction="US" if not country or country == "US" else country,
        product_types=["Drug"],
        category="adverse_event",
        severity=sev.severity_for_adverse_event(item),
        raw=item,
    )
    return _finish(alert, first_present(item, "receivedate", "receiptdate"), None)


def _map_fda_shortage(record: FDARecord) -> NormalizedAlert:
    item = record.payload
    name = clean_text(first_present(item, "generic_name", "proprietary_name"))
    form = clean_text(item.get("dosage_form"))
    external_id = normalize_external_id(first_present(item, "package_ndc", "product_ndc"))
    if not external_id and name:
        external_id = normalize_external_id(f"{name} {form}".strip())

    status = clean_text(item.get("status"))
    reason = clean_text(item.get("shortage_reason"))
    firm = clean_text(item.get("company_name"))
    title = f"Drug shortage: {name}" if name else "FDA Drug Shortage"
    if form:
        title = f"{title} ({form})"

    summary_parts = [p for p in (f"Status: {status}" if status else "", reason, firm) if p]
    alert = NormalizedAlert(
        external_id=external_id,
        source="FDA",
        title=_truncate(title),
        summary=". ".join(summary_parts),
        link_url="https://dps.fda.gov/drugshortages",
        product_types=dedupe_preserving_order(["Drug"] + as_list(item.get("therapeutic_category"))),
        category="shortage",
        severity=sev.severity_for_shortage(status),
        raw=item,
    )
    return _finish(alert, first_present(item, "initial_posting_date"), first_present(item, "update_date"))


def map_fda(record: FDARecord) -> NormalizedAlert:
    if record.origin == "drug_event":
        return _map_fda_event(record)
    if record.origin == "drug_shortage":
        return _map_fda_shortage(record)

    item = record.payload
    external_id = normalize_external_id(first_present(item, "recall_number", "event_id", "id"))

    description = clean_text(item.get("product_description"))
    reason = clean_text(item.get("reason_for_recall"))
    firm = clean_text(item.get("recalling_firm"))
    title = description or reason or "FDA Recall"
    if firm and description:
        title = f"{firm}: {description}"

    locations: List[str] = []
    if item.get("state"):
        locations.append(str(item["state"]).strip())
    locations.extend(state_codes(item.get("distribution_pattern")))

    product_types: List[str] = []
    if record.origin in FDA_ORIGIN_PRODUCT_TYPES:
        product_types.append(FDA_ORIGIN_PRODUCT_TYPES[record.origin])
    product_types.extend(as_list(item.get("product_type")))

    country = clean_text(item.get("country"))
    event_id = first_present(item, "event_id")
    link = f"https://www.accessdata.fda.gov/scripts/ires/index.cfm?Event={event_id}" if event_id else None

    alert = NormalizedAlert(
        external_id=external_id,
        source="FDA",
        title=_truncate(title),
        summary=reason or description,
        link_url=link,
        jurisdiction="US" if not country or country == "United States" else country,
        locations=locations,
        product_types=dedupe_preserving_order(product_types),
        category="recall",
        severity=sev.severity_for_fda(item.get("classification")),
        raw=item,
    )
    return _finish(
        alert,
        first_present(item, "report_date", "recall_initiation_date", "center_classification_date"),
        first_present(item, "termination_date"),
    )


# -----------------------------------------------------------------------------
# FSIS (recall API or RSS)
# -----------------------------------------------------------------------------
def _fsis_product_types(text: str) -> List[str]:
    return [label for keywords, label in FSIS_PRODUCT_KEYWORDS if contains_keyword(text, keywords)]


def map_fsis(record: FSISRecord) -> NormalizedAlert:
    item = record.payload
    title = clean_text(first_present(item, "field_title", "title", "productName", "product_name"))
    summary = clean_text(
        first_present(item, "field_summary", "description", "summary", "reasonForRecall", "reason_for_recall")
    )
    classification = clean_text(first_present(item, "field_recall_classification", "recallClass", "recall_class"))

    recall_number = first_present(item, "field_recall_number", "recallNumber", "recall_number")
    if not recall_number:
        match = _FSIS_RECALL_NUMBER_RE.search(f"{title} {summary}")
        recall_number = match.group(1) if match else first_present(item, "guid", "id", "link")

    locations = as_list(first_present(item, "field_states", "states"))
    locations.extend(state_codes(first_present(item, "distributionPattern", "distribution_pattern")))

    text = " ".join(part for part in (title, summary, classification) if part)
    alert = NormalizedAlert(
        external_id=normalize_external_id(recall_number),
        source="FSIS",
        title=_truncate(title or "FSIS Recall"),
        summary=summary,
        link_url=_link(first_present(item, "field_recall_url", "link", "url")),
        jurisdiction="US",
        locations=locations,
        product_types=_fsis_product_types(text),
        category="recall",
        severity=sev.severity_for_fsis(text),
        raw=item,
    )
    return _finish(
        alert,
        first_present(item, "field_recall_date", "pubDate", "published", "recallDate", "recall_date"),
        first_present(item, "field_last_modif_date", "updated"),
    )


# -----------------------------------------------------------------------------
# CDC (outbreak investigations and RSS advisories)
# -----------------------------------------------------------------------------
def map_cdc(record: CDCRecord) -> NormalizedAlert:
    item = record.payload
    title = clean_text(first_present(item, "title", "headline", "pathogen", "name"))
    summary = clean_text(first_present(item, "summary", "description", "investigation_summary"))
    text = f"{title} {summary}"

    if record.kind == "outbreak":
        external_id = first_present(item, "id", "outbreak_id", "outbreak_code")
        status = clean_text(first_present(item, "investigation_status", "status")) or "active"
        published_raw = first_present(item, "investigation_start_date", "date_published")
        locations = as_list(first_present(item, "states_affected", "locations"))
        product_types = as_list(first_present(item, "food_vehicle", "products"))
        category = "outbreak"
        default_title = "CDC Outbreak Investigation"
    else:
        external_id = first_present(item, "guid", "id", "link")
        status = "active"
        published_raw = first_present(item, "pubDate", "published", "pub_date")
        locations = as_list(item.get("locations"))
        product_types = []
        category = "advisory"
        default_title = "CDC Advisory"

    alert = NormalizedAlert(
        external_id=normalize_external_id(external_id),
        source="CDC",
        title=_truncate(title or default_title),
        summary=summary,
        link_url=_link(first_present(item, "link", "web_link", "url")),
        jurisdiction=clean_text(item.get("jurisdiction")) or "US",
        locations=locations,
        product_types=product_types,
        category=category,
        severity=sev.severity_for_cdc(record.kind, status, text),
        raw=item,
    )
    return _finish(alert, published_raw, first_present(item, "date_updated", "last_updated", "updated"))


# -----------------------------------------------------------------------------
# EPA (ECHO enforcement cases)
# -----------------------------------------------------------------------------
def _epa_media(item: Dict[str, Any]) -> List[str]:
    statutes = as_list(first_present(item, "Statutes", "Law", "PrimaryLaw", "Laws"))
    media = [EPA_STATUTE_MEDIA[s.upper()] for s in statutes if s.upper() in EPA_STATUTE_MEDIA]
    return dedupe_preserving_order(media)


def map_epa(record: EPARecord) -> NormalizedAlert:
    item = record.payload
    penalty = sev.parse_penalty(first_present(item, "FedPenaltyAssessed", "TotalPenalty"))
    entity = clean_text(first_present(item, "DefendantEntity", "FacName", "FacilityName", "CaseName"))
    violations = clean_text(first_present(item, "ViolationTypes", "Violations"))

    parts = ["EPA enforcement action."]
    if violations:
        parts.append(f"Violations: {violations}.")
    if penalty > 0:
        parts.append(f"Penalty: ${penalty:,.0f}.")

    state = clean_text(first_present(item, "StateCode", "FacState", "State"))
    activity_id = first_present(item, "ActivityId", "ActivityID")
    link = f"https://echo.epa.gov/enforcement-case-report?id={activity_id}" if activity_id else None

    alert = NormalizedAlert(
        external_id=normalize_external_id(first_present(item, "CaseNumber", "CaseNum", "ActivityId", "ActivityID")),
        source="EPA",
        title=_truncate(f"EPA Enforcement: {entity}" if entity else "EPA Enforcement Action"),
        summary=" ".join(parts),
        link_url=link,
        jurisdiction=state or "US",
        locations=[state] if state else [],
        product_types=_epa_media(item),
        category="enforcement",
        severity=sev.severity_for_epa_penalty(penalty),
        raw=item,
    )
    return _finish(
        alert,
        first_present(item, "SettlementDate", "DateFiled", "FiledDate", "ActionDate"),
        first_present(item, "DateUpdated", "LastUpdated"),
    )


# -----------------------------------------------------------------------------
# Federal Register and Regulations.gov
# -----------------------------------------------------------------------------
def _document_category(document_type: Any) -> str:
    normalized = clean_text(document_type).lower()
    if normalized == "rule":
        return "rule"
    if normalized == "proposed rule":
        return "proposed_rule"
    return "notice"


def map_federal_register(record: FederalRegisterRecord) -> NormalizedAlert:
    item = record.payload
    agencies = [
        clean_text(agency.get("name") or agency.get("raw_name"))
        for agency in _dict_list(item.get("agencies"))
    ]
    document_type = item.get("type")
    alert = NormalizedAlert(
        external_id=normalize_external_id(item.get("document_number")),
        source="FEDERAL_REGISTER",
        title=_truncate(clean_text(item.get("title")) or "Federal Register Document"),
        summary=clean_text(item.get("abstract")),
        link_url=_link(first_present(item, "html_url", "pdf_url")),
        jurisdiction="US",
        locations=[],
        product_types=[a for a in agencies if a],
        category=_document_category(document_type),
        severity=sev.severity_for_document_type(document_type),
        raw=item,
    )
    return _finish(alert, item.get("publication_date"), None)


def map_regulations_gov(record: RegulationsGovRecord) -> NormalizedAlert:
    item = record.payload
    attributes = item.get("attributes") if isinstance(item.get("attributes"), dict) else {}
    document_id = item.get("id")
    document_type = attributes.get("documentType")
    alert = NormalizedAlert(
        external_id=normalize_external_id(document_id),
        source="REGULATIONS_GOV",
        title=_truncate(clean_text(attributes.get("title")) or "Regulations.gov Document"),
        summary=clean_text(first_present(attributes, "summary", "docketTitle")),
        link_url=f"https://www.regulations.gov/document/{document_id}" if document_id else None,
        jurisdiction="US",
        locations=[],
        product_types=as_list(attributes.get("agencyId")),
        category=_document_category(document_type),
        severity=sev.severity_for_document_type(document_type),
        raw=item,
    )
    return _finish(alert, attributes.get("postedDate"), attributes.get("lastModifiedDate"))


_MAPPERS: Dict[str, Callable[[Any], NormalizedAlert]] = {
    "FDA": map_fda,
    "FSIS": map_fsis,
    "CDC": map_cdc,
    "EPA": map_epa,
    "FEDERAL_REGISTER": map_federal_register,
    "REGULATIONS_GOV": map_regulations_gov,
}


def map_record(record: SourceRecord) -> NormalizedAlert:
    """Dispatch on the record's ``source`` discriminator."""
    mapper = _MAPPERS.get(getattr(record, "source", None))
    if mapper is None:
        raise ValueError(f"No mapper for source {getattr(record, 'source', None)!r}")
    return mapper(record)
