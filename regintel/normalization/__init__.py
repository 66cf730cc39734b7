from regintel.normalization.mappers import (
    compute_alert_hash,
    map_cdc,
    map_epa,
    map_fda,
    map_federal_register,
    map_fsis,
    map_record,
    map_regulations_gov,
)
from regintel.normalization.validator import validate_alert

__all__ = [
    "compute_alert_hash",
    "map_cdc",
    "map_epa",
    "map_fda",
    "map_federal_register",
    "map_fsis",
    "map_record",
    "map_regulations_gov",
    "validate_alert",
]
