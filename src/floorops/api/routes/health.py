from __future__ import annotations

from fastapi import APIRouter, Request, Response, status

from floorops.api.dependencies import storage_of
from floorops.infrastructure.cache.redis_client import ping_redis
from floorops.infrastructure.db.session import ping_database
from floorops.infrastructure.storage import SQL_BACKEND

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(request: Request, response: Response) -> dict[str, object]:
    storage = storage_of(request)
    if storage.backend != SQL_BACKEND:
        return {"status": "ok", "storage": storage.backend}

    database_ready = ping_database(timeout_seconds=1.0)
    redis_ready = ping_redis(timeout_seconds=1.0)
    if database_ready and redis_ready:
        return {"status": "ok", "storage": storage.backend}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "unavailable",
        "storage": storage.backend,
        "checks": {"database": database_ready, "redis": redis_ready},
    }
