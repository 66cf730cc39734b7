"""Abstract source interface for ingestion."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

import feedparser
import httpx

from regintel.core.config import Settings
from regintel.normalization.text import parse_date
from regintel.schemas.records import SourceRecord


class BaseSource(ABC):
    """One endpoint family of one agency.

    Adapters make a single attempt per ``fetch``. Transport and HTTP errors
    propagate to the caller, which records them against the run.
    """

    name: str
    origin: str

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.settings = settings

    @abstractmethod
    async def fetch(self, days_back: int) -> List[SourceRecord]:
        """Fetch tagged source records published within the last ``days_back`` days."""

    @property
    def label(self) -> str:
        return f"{self.name} {self.origin.replace('_', ' ').title()}"

    # -------------------------------------------------------------------------
    # Window helpers
    # -------------------------------------------------------------------------
    @staticmethod
    def window(days_back: int) -> Tuple[datetime, datetime]:
        end = datetime.now(timezone.utc)
        start = end - timedelta(days=max(days_back, 0))
        return start, end

    @staticmethod
    def within_window(value: Any, start: datetime) -> bool:
        """Day-granular window check. Undated items are kept."""
        dt = parse_date(value)
        if dt is None:
            return True
        return dt.date() >= start.date()

    # -------------------------------------------------------------------------
    # HTTP helpers
    # -------------------------------------------------------------------------
    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"User-Agent": self.settings.HTTP_USER_AGENT, "Accept": "application/json"}
        if extra:
            headers.update(extra)
        return headers

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        resp = await self.client.get(url, params=params, headers=self._headers(headers))
        resp.raise_for_status()
        return resp

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        resp = await self._get(url, params=params, headers=headers)
        return resp.json()

    async def _get_feed(self, url: str) -> List[Dict[str, Any]]:
        resp = await self._get(url, headers={"Accept": "application/rss+xml, application/xml, text/xml"})
        return parse_feed(resp.text)


def parse_feed(text: str) -> List[Dict[str, Any]]:
    """Flatten RSS/Atom entries into plain dicts with RSS-style keys."""
    feed = feedparser.parse(text)
    items: List[Dict[str, Any]] = []
    for entry in feed.get("entries", []):
        items.append(
            {
                "title": entry.get("title"),
                "description": entry.get("summary") or entry.get("description"),
                "link": entry.get("link"),
                "guid": entry.get("id") or entry.get("guid"),
                "pubDate": entry.get("published") or entry.get("updated"),
            }
        )
    return items


def create_client(settings: Settings) -> httpx.AsyncClient:
    """Shared outbound client; the per-request timeout comes from settings."""
    return httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": settings.HTTP_USER_AGENT},
    )
