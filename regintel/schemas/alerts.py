"""Unified normalized alert model"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Severity = Literal["Critical", "High", "Medium", "Low"]

SEVERITIES: tuple[str, ...] = ("Critical", "High", "Medium", "Low")


class NormalizedAlert(BaseModel):
    """Common record shape produced by every mapper.

    Fields are intentionally lenient; ``validate_alert`` is the gatekeeper.
    """

    external_id: str = ""
    source: str = ""
    title: str = ""
    summary: str = ""
    link_url: Optional[str] = None
    date_published: str = ""
    date_updated: Optional[str] = None
    jurisdiction: str = "US"
    locations: List[str] = Field(default_factory=list)
    product_types: List[str] = Field(default_factory=list)
    category: str = ""
    severity: str = "Medium"
    raw: Dict[str, Any] = Field(default_factory=dict)
    hash: str = ""
