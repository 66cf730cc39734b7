from regintel.api.routes.alerts import router as alerts_router
from regintel.api.routes.health import router as health_router
from regintel.api.routes.sync import router as sync_router

__all__ = ["alerts_router", "health_router", "sync_router"]
