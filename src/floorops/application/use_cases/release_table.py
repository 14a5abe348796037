from __future__ import annotations

from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.responses import ReleaseTableResponse
from floorops.application.mappers.floor_mapper import to_reservation_response
from floorops.application.ports.repositories import ReservationRepository, TableRepository
from floorops.application.use_cases.update_reservation_status import apply_transition
from floorops.domain.common.errors import TableNotFoundError
from floorops.domain.common.ids import TableId
from floorops.domain.reservation.entities import ReservationStatus
from floorops.domain.reservation.time_window import date_of


class ReleaseTable:
    """Close out the guest currently holding a table today."""

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

    def execute(self, table_id: TableId) -> ReleaseTableResponse:
        if self._table_repository.get(table_id) is None:
            raise TableNotFoundError(
                f"table {table_id} not found", details={"tableId": str(table_id)}
            )

        today = date_of(self._clock())
        with self._locks.hold(f"reservations:{today}"):
            active = next(
                (
                    reservation
                    for reservation in self._reservation_repository.list_for_date(today)
                    if reservation.is_active and table_id in reservation.table_ids
                ),
                None,
            )
            if active is None:
                return ReleaseTableResponse(released=False)

            with self._locks.hold(f"reservation:{active.reservation_id}"):
                if active.status == ReservationStatus.PENDING:
                    apply_transition(
                        self._reservation_repository,
                        active.reservation_id,
                        ReservationStatus.CONFIRMED,
                    )
                completed = apply_transition(
                    self._reservation_repository,
                    active.reservation_id,
                    ReservationStatus.COMPLETED,
                )

        return ReleaseTableResponse(released=True, reservation=to_reservation_response(completed))
