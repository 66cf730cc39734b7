"""API dependencies"""

from typing import AsyncGenerator, Generator

import httpx
from fastapi import Depends
from sqlalchemy.orm import Session

from regintel.core.config import settings
from regintel.core.db import SessionLocal
from regintel.ingestion import create_client
from regintel.services.alert_store import AlertStore, SqlAlertStore
from regintel.services.sync_service import AlertSyncService, build_default_sources


def get_db() -> Generator[Session, None, None]:
    """Database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Outbound client, closed when the request finishes"""
    async with create_client(settings) as client:
        yield client


def get_alert_store() -> AlertStore:
    return SqlAlertStore(SessionLocal)


def get_sync_service(
    client: httpx.AsyncClient = Depends(get_http_client),
    store: AlertStore = Depends(get_alert_store),
) -> AlertSyncService:
    return AlertSyncService(
        store,
        build_default_sources(settings, client),
        batch_size=settings.SYNC_BATCH_SIZE,
        days_back=settings.SYNC_DAYS_BACK,
    )


def get_status_service(store: AlertStore = Depends(get_alert_store)) -> AlertSyncService:
    """Read-only service for status and log queries; no adapters, no outbound client"""
    return AlertSyncService(store, {})
