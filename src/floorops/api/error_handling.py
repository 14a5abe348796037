from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from floorops.api.middleware.request_id import get_request_id
from floorops.domain.common.errors import (
    AreaTableLimitError,
    CapacityExceededError,
    ConcurrencyConflictError,
    FloorError,
    IdempotencyKeyReuseError,
    InputValidationError,
    InvalidTransitionError,
    NotFoundError,
    PastReservationError,
    TableConflictError,
    VipUnitLimitExceededError,
)

logger = logging.getLogger("floorops.api.errors")


def _error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": jsonable_encoder(details or {}),
            },
            "requestId": get_request_id(),
        },
    )


def _floor_error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        floor_exc = cast(FloorError, exc)
        logger.info(
            "domain_error",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "error_code": floor_exc.code,
            },
        )
        return _error_response(
            status_code=status_code,
            code=floor_exc.code,
            message=floor_exc.message,
            details=floor_exc.details,
        )

    return handler


async def _http_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    message = str(http_exc.detail) if http_exc.detail else "request failed"
    code = "HTTP_ERROR"
    if http_exc.status_code == 404:
        code = "NOT_FOUND"
    elif http_exc.status_code == 405:
        code = "METHOD_NOT_ALLOWED"
    return _error_response(
        status_code=http_exc.status_code,
        code=code,
        message=message,
    )


async def _validation_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    validation_exc = cast(RequestValidationError, exc)
    return _error_response(
        status_code=422,
        code=InputValidationError.code,
        message="request validation failed",
        details={
            "errors": [
                {key: value for key, value in error.items() if key not in {"ctx", "url"}}
                for error in validation_exc.errors()
            ]
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette resolves handlers along the MRO, so NotFoundError covers every lookup failure.
    mappings: list[tuple[type[FloorError], int]] = [
        (InputValidationError, 422),
        (PastReservationError, 422),
        (CapacityExceededError, 422),
        (InvalidTransitionError, 422),
        (TableConflictError, 409),
        (VipUnitLimitExceededError, 409),
        (IdempotencyKeyReuseError, 409),
        (ConcurrencyConflictError, 409),
        (AreaTableLimitError, 409),
        (NotFoundError, 404),
    ]

    for exc_cls, status_code in mappings:
        app.add_exception_handler(exc_cls, _floor_error_handler(status_code))

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
