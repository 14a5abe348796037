from __future__ import annotations

import logging
import os
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from floorops.api.dependencies import reservation_rules, restaurant_clock
from floorops.api.error_handling import register_exception_handlers
from floorops.api.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from floorops.api.routes.areas import router as areas_router
from floorops.api.routes.availability import router as availability_router
from floorops.api.routes.floor_layout import router as floor_layout_router
from floorops.api.routes.health import router as health_router
from floorops.api.routes.metrics import router as metrics_router
from floorops.api.routes.reservations import router as reservations_router
from floorops.api.routes.tables import router as tables_router
from floorops.api.routes.walkins import router as walkins_router
from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.domain.reservation.rules import ReservationRules
from floorops.infrastructure.observability.logging_config import configure_logging
from floorops.infrastructure.observability.otel import configure_otel
from floorops.infrastructure.storage import Storage, build_storage

logger = logging.getLogger("floorops.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()
    if env in {"dev", "test"}:
        return ["*"]

    default_value = "https://your-prod-domain.com"
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", default_value)
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_template(request: Request) -> str:
    # Label by route template so ids in the path do not explode metric cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            path = _route_template(request)
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        path = _route_template(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


def create_app(
    storage: Storage | None = None,
    clock: Clock | None = None,
    rules: ReservationRules | None = None,
) -> FastAPI:
    configure_logging()

    app = FastAPI(title="FloorOps Backend", version="0.1.0")
    app.state.storage = storage or build_storage()
    app.state.locks = KeyedLocks()
    app.state.clock = clock or restaurant_clock()
    app.state.rules = rules or reservation_rules()

    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(areas_router)
    app.include_router(tables_router)
    app.include_router(reservations_router)
    app.include_router(walkins_router)
    app.include_router(availability_router)
    app.include_router(floor_layout_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", REQUEST_ID_HEADER],
    )

    configure_otel(app)
    return app


app = create_app()
