from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from subsync.api.deps import app_settings, record_store
from subsync.core.config import Settings
from subsync.services.record_store import RecordStore

router = APIRouter(tags=["health"])


@router.get("/")
@router.get("/health")
def health(settings: Settings = Depends(app_settings)):  # noqa: B008
    return {
        "status": "OK",
        "service": settings.service_name,
        "message": f"{settings.service_name} is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db-ping")
def db_ping(store: RecordStore = Depends(record_store)):  # noqa: B008
    store.ping()
    return {"db": "ok"}
