"""Gatekeeper between the mappers and the store."""

from regintel.core.errors import AlertValidationError
from regintel.schemas.alerts import SEVERITIES, NormalizedAlert

REQUIRED_FIELDS = ("external_id", "source", "title", "hash")


def validate_alert(alert: NormalizedAlert) -> NormalizedAlert:
    """Return ``alert`` unchanged, or raise naming every missing required field."""
    missing = [name for name in REQUIRED_FIELDS if not str(getattr(alert, name, "") or "").strip()]
    if missing:
        raise AlertValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)
    if alert.severity not in SEVERITIES:
        raise AlertValidationError(f"Unknown severity: {alert.severity!r}", fields=["severity"])
    return alert
