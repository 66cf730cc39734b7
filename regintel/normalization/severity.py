"""Severity buckets derived from source-specific signals."""

from __future__ import annotations

import re
from typing import Any

from regintel.normalization.text import clean_text, contains_keyword

CRITICAL = "Critical"
HIGH = "High"
MEDIUM = "Medium"
LOW = "Low"

# Neutral bucket for records that carry no usable signal
DEFAULT_SEVERITY = MEDIUM

FSIS_HIGH_KEYWORDS = ("class i", "listeria", "e. coli", "e.coli", "salmonella", "serious", "death")
FSIS_MEDIUM_KEYWORDS = ("class ii", "illness", "contamination", "allergen", "undeclared")

CDC_HIGH_KEYWORDS = ("outbreak", "emergency", "death", "deaths")

EPA_PENALTY_TIERS = (
    (1_000_000.0, CRITICAL),
    (100_000.0, HIGH),
    (10_000.0, MEDIUM),
)


def severity_for_fda(classification: Any) -> str:
    normalized = clean_text(classification).lower()
    if not normalized:
        return DEFAULT_SEVERITY
    if normalized == "class i":
        return CRITICAL
    if normalized == "class ii":
        return HIGH
    if normalized == "class iii":
        return LOW
    return DEFAULT_SEVERITY


def severity_for_adverse_event(item: dict) -> str:
    """FAERS flags are "1" when set."""
    if str(item.get("seriousnessdeath") or "") == "1":
        return CRITICAL
    if str(item.get("serious") or "") == "1":
        return HIGH
    return MEDIUM


def severity_for_shortage(status: Any) -> str:
    normalized = clean_text(status).lower()
    if normalized == "current":
        return HIGH
    if normalized == "resolved":
        return LOW
    return DEFAULT_SEVERITY


def severity_for_fsis(text: str) -> str:
    if contains_keyword(text, FSIS_HIGH_KEYWORDS):
        return HIGH
    if contains_keyword(text, FSIS_MEDIUM_KEYWORDS):
        return MEDIUM
    return LOW


def severity_for_cdc(kind: str, status: str, text: str) -> str:
    if kind == "outbreak":
        closed = any(word in status.lower() for word in ("closed", "resolved", "over"))
        return MEDIUM if closed else HIGH
    if contains_keyword(text, CDC_HIGH_KEYWORDS):
        return HIGH
    return MEDIUM


def parse_penalty(value: Any) -> float:
    """Penalty amount as float; anything unparseable counts as 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = re.sub(r"[$,\s]", "", str(value))
    try:
        return float(cleaned) if cleaned else 0.0
    except ValueError:
        return 0.0


def severity_for_epa_penalty(penalty: float) -> str:
    for threshold, bucket in EPA_PENALTY_TIERS:
        if penalty > threshold:
            return bucket
    return LOW


def severity_for_document_type(document_type: Any) -> str:
    normalized = clean_text(document_type).lower()
    if normalized == "rule":
        return HIGH
    if normalized == "proposed rule":
        return MEDIUM
    return LOW
