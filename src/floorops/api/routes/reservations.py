from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Header, Query, Request, status

from floorops.api.dependencies import clock_of, locks_of, rules_of, storage_of
from floorops.application.dto.responses import ReservationResponse
from floorops.application.use_cases.create_reservation import CreateReservation
from floorops.application.use_cases.floor_queries import GetReservations
from floorops.application.use_cases.update_reservation_status import UpdateReservationStatus
from floorops.domain.common.ids import AreaId, ReservationId

router = APIRouter()


def _get_reservations_use_case(request: Request) -> GetReservations:
    storage = storage_of(request)
    return GetReservations(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
    )


def _create_reservation_use_case(request: Request) -> CreateReservation:
    storage = storage_of(request)
    return CreateReservation(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
        idempotency_store=storage.idempotency,
        locks=locks_of(request),
        clock=clock_of(request),
        rules=rules_of(request),
    )


def _update_reservation_status_use_case(request: Request) -> UpdateReservationStatus:
    return UpdateReservationStatus(
        reservation_repository=storage_of(request).reservations,
        locks=locks_of(request),
    )


@router.get("/v1/reservations", response_model=list[ReservationResponse])
def list_reservations(
    request: Request,
    date: str = Query(...),
    area_id: str | None = Query(default=None, alias="areaId"),
) -> list[ReservationResponse]:
    return _get_reservations_use_case(request).execute(
        date=date,
        area_id=AreaId(area_id) if area_id else None,
    )


@router.post(
    "/v1/reservations",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_reservation(
    request: Request,
    payload: dict[str, Any] = Body(...),
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> ReservationResponse:
    return _create_reservation_use_case(request).execute(payload, idempotency_key)


@router.patch("/v1/reservations/{reservation_id}/status", response_model=ReservationResponse)
def update_reservation_status(
    reservation_id: str,
    request: Request,
    payload: dict[str, Any] = Body(...),
) -> ReservationResponse:
    return _update_reservation_status_use_case(request).execute(
        ReservationId(reservation_id), payload
    )
