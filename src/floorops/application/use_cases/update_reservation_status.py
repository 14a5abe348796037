from __future__ import annotations

from typing import Any

from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import UpdateReservationStatusRequest, parse_request
from floorops.application.dto.responses import ReservationResponse
from floorops.application.mappers.floor_mapper import to_reservation_response
from floorops.application.metrics.floor_activity import record_transition
from floorops.application.ports.repositories import ReservationRepository
from floorops.domain.common.errors import ReservationNotFoundError
from floorops.domain.common.ids import ReservationId
from floorops.domain.reservation.entities import Reservation, ReservationStatus


class UpdateReservationStatus:
    def __init__(self, reservation_repository: ReservationRepository, locks: KeyedLocks) -> None:
        self._reservation_repository = reservation_repository
        self._locks = locks

    def execute(self, reservation_id: ReservationId, payload: Any) -> ReservationResponse:
        request_dto = parse_request(UpdateReservationStatusRequest, payload)
        with self._locks.hold(f"reservation:{reservation_id}"):
            updated = apply_transition(
                self._reservation_repository,
                reservation_id,
                ReservationStatus(request_dto.status),
            )
        return to_reservation_response(updated)


def apply_transition(
    reservation_repository: ReservationRepository,
    reservation_id: ReservationId,
    requested: ReservationStatus,
) -> Reservation:
    """Load, validate and persist one status change. Callers hold the reservation lock."""
    reservation = reservation_repository.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError(
            f"reservation {reservation_id} not found",
            details={"reservationId": str(reservation_id)},
        )

    transitioned = reservation.transition_to(requested)
    if transitioned is reservation:
        return reservation

    persisted = reservation_repository.update_status(reservation_id, requested)
    record_transition(from_status=reservation.status.value, to_status=requested.value)
    return persisted
