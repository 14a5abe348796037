from __future__ import annotations

from typing import Any
from uuid import uuid4

from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import CreateWalkInRequest, parse_request
from floorops.application.dto.responses import ReservationResponse
from floorops.application.mappers.floor_mapper import to_reservation_response
from floorops.application.metrics.floor_activity import (
    record_reservation_rejected,
    record_walk_in,
)
from floorops.application.ports.repositories import ReservationRepository, TableRepository
from floorops.domain.common.errors import TableConflictError, TableNotFoundError
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import (
    WALK_IN_DURATION,
    Reservation,
    ReservationStatus,
)
from floorops.domain.reservation.rules import find_table_conflict
from floorops.domain.reservation.time_window import (
    DAY_END,
    clock_of,
    date_of,
    from_minutes,
    to_minutes,
)

WALK_IN_CLIENT_NAME = "Walk-in"
WALK_IN_PARTY_SIZE = 1


class CreateWalkIn:
    def __init__(
        self,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._table_repository = table_repository
        self._reservation_repository = reservation_repository
        self._locks = locks
        self._clock = clock

    def execute(self, payload: Any) -> ReservationResponse:
        request_dto = parse_request(CreateWalkInRequest, payload)
        table_id = TableId(request_dto.table_id)
        if self._table_repository.get(table_id) is None:
            raise TableNotFoundError(
                f"table {table_id} not found", details={"tableId": str(table_id)}
            )

        now = self._clock()
        today = date_of(now)
        start_time = _walk_in_start(clock_of(now))

        with self._locks.hold(f"reservations:{today}"):
            reservation = Reservation(
                reservation_id=ReservationId(f"res_{uuid4().hex[:12]}"),
                table_ids=(table_id,),
                client_name=request_dto.client_name or WALK_IN_CLIENT_NAME,
                party_size=request_dto.party_size or WALK_IN_PARTY_SIZE,
                date=today,
                start_time=start_time,
                end_time=DAY_END,
                status=ReservationStatus.CONFIRMED,
                duration=WALK_IN_DURATION,
                notes=request_dto.notes or "",
                created_at=now,
            )
            self._reservation_repository.add_guarded(
                reservation,
                guard=lambda same_day: _check_table_free(same_day, reservation),
                lock_table_ids=(table_id,),
            )

        record_walk_in()
        return to_reservation_response(reservation)


def _check_table_free(same_day: list[Reservation], reservation: Reservation) -> None:
    conflict = find_table_conflict(
        same_day,
        reservation.table_ids,
        reservation.date,
        reservation.start_time,
        reservation.end_time,
    )
    if conflict is not None:
        record_reservation_rejected(TableConflictError.code)
        raise TableConflictError(
            f"table {reservation.table_ids[0]} is already taken",
            details={
                "conflictingReservationId": str(conflict.reservation_id),
                "tableIds": [str(table_id) for table_id in reservation.table_ids],
            },
        )


def _walk_in_start(current: str) -> str:
    # Keep start < day-end for guests seated in the last minute of the day.
    if current >= DAY_END:
        return from_minutes(to_minutes(DAY_END) - 1)
    return current
