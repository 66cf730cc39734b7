from regintel.models.base import Base
from regintel.models.alerts import Alert
from regintel.models.sync_logs import AlertSyncLog

__all__ = [
    "Base",
    "Alert",
    "AlertSyncLog",
]
