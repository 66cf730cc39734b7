# Services package
from regintel.services.alert_store import AlertStore, SqlAlertStore
from regintel.services.data_service import DataService
from regintel.services.sync_service import (
    CORE_SOURCES,
    SOURCE_NAMES,
    AlertSyncService,
    build_default_sources,
)

__all__ = [
    "AlertStore",
    "SqlAlertStore",
    "DataService",
    "AlertSyncService",
    "build_default_sources",
    "CORE_SOURCES",
    "SOURCE_NAMES",
]
