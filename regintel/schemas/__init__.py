from regintel.schemas.alerts import SEVERITIES, NormalizedAlert
from regintel.schemas.records import (
    CDCRecord,
    EPARecord,
    FDARecord,
    FederalRegisterRecord,
    FSISRecord,
    RegulationsGovRecord,
    SourceRecord,
)
from regintel.schemas.sync import BatchOutcome, SyncLogOut, SyncResult, SyncStatus

__all__ = [
    "SEVERITIES",
    "NormalizedAlert",
    "CDCRecord",
    "EPARecord",
    "FDARecord",
    "FederalRegisterRecord",
    "FSISRecord",
    "RegulationsGovRecord",
    "SourceRecord",
    "BatchOutcome",
    "SyncLogOut",
    "SyncResult",
    "SyncStatus",
]
