"""Text, identifier and date helpers shared by the mappers."""

from __future__ import annotations

import html
import re
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Iterable, List, Optional

_TAG_RE = re.compile(r"<[^>]*>")
_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_WS_RE = re.compile(r"\s+")
_STATE_CODE_RE = re.compile(r"\b[A-Z]{2}\b")

US_STATE_CODES = frozenset(
    "AL AK AZ AR CA CO CT DE FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO MT NE NV NH NJ NM NY "
    "NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY DC PR VI GU AS MP".split()
)


def clean_text(value: Any) -> str:
    """Strip CDATA wrappers and HTML tags, unescape entities, collapse whitespace."""
    if value is None:
        return ""
    text = str(value)
    text = _CDATA_RE.sub(r"\1", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _WS_RE.sub(" ", text).strip()


def normalize_external_id(value: Any) -> str:
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value).strip().upper())


def first_present(item: dict, *keys: str) -> Any:
    """Return the first value under ``keys`` that is not None or blank."""
    for key in keys:
        value = item.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def as_list(value: Any) -> List[str]:
    """Coerce a scalar, delimited string or sequence into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in re.split(r"[,;]", value) if part.strip()]
    if isinstance(value, Iterable):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [str(value)]


def state_codes(text: Any) -> List[str]:
    """US state abbreviations found in ``text``, in order of appearance."""
    if not text:
        return []
    return [code for code in _STATE_CODE_RE.findall(str(text)) if code in US_STATE_CODES]


def parse_date(value: Any) -> Optional[datetime]:
    """Parse the date shapes the agencies emit; ``None`` when unparseable.

    Handles ISO-8601, openFDA ``YYYYMMDD``, RFC 822 (RSS ``pubDate``),
    ``MM/DD/YYYY`` (EPA ECHO) and ``datetime``/``date`` objects.
    """
    if value is None or value == "":
        return None
    try:
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, date):
            dt = datetime(value.year, value.month, value.day)
        else:
            text = str(value).strip()
            if re.fullmatch(r"\d{8}", text):
                dt = datetime.strptime(text, "%Y%m%d")
            elif re.fullmatch(r"\d{1,2}/\d{1,2}/\d{4}", text):
                dt = datetime.strptime(text, "%m/%d/%Y")
            elif re.match(r"\d{4}-\d{2}-\d{2}", text):
                dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
            else:
                dt = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_or_none(value: Any) -> Optional[str]:
    dt = parse_date(value)
    return dt.isoformat() if dt else None


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    """Whole-word, case-insensitive match of any keyword in ``text``."""
    lowered = text.lower()
    return any(re.search(rf"\b{re.escape(keyword)}\b", lowered) for keyword in keywords)


def dedupe_preserving_order(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result
