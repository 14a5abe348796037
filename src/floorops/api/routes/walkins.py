from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request, status

from floorops.api.dependencies import clock_of, locks_of, storage_of
from floorops.application.dto.responses import ReservationResponse
from floorops.application.use_cases.create_walk_in import CreateWalkIn

router = APIRouter()


def _create_walk_in_use_case(request: Request) -> CreateWalkIn:
    storage = storage_of(request)
    return CreateWalkIn(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
        locks=locks_of(request),
        clock=clock_of(request),
    )


@router.post("/v1/walkins", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def create_walk_in(request: Request, payload: dict[str, Any] = Body(...)) -> ReservationResponse:
    return _create_walk_in_use_case(request).execute(payload)
