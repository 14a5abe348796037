from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from floorops.domain.area.entities import Area
from floorops.domain.common.ids import AreaId, ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import Table


class AreaRepository(Protocol):
    def list(self) -> list[Area]: ...

    def get(self, area_id: AreaId) -> Area | None: ...


class TableRepository(Protocol):
    def list(self, area_id: AreaId | None = None) -> list[Table]: ...

    def get(self, table_id: TableId) -> Table | None: ...

    def add(self, table: Table) -> None: ...

    def count_for_area(self, area_id: AreaId) -> int: ...

    def update_position(
        self,
        table_id: TableId,
        x: float,
        y: float,
        expected_version: int,
        updated_at: datetime,
    ) -> Table: ...


class ReservationRepository(Protocol):
    def list_for_date(self, date: str) -> list[Reservation]: ...

    def get(self, reservation_id: ReservationId) -> Reservation | None: ...

    def add(self, reservation: Reservation) -> None: ...

    def add_guarded(
        self,
        reservation: Reservation,
        guard: Callable[[list[Reservation]], None],
        lock_table_ids: Iterable[TableId] = (),
    ) -> None:
        """Insert after ``guard`` accepts the same-day reservations.

        The read, the guard and the insert run atomically with respect to
        other writers booking any table in ``lock_table_ids``. ``guard``
        raises to abort.
        """
        ...

    def update_status(
        self,
        reservation_id: ReservationId,
        status: ReservationStatus,
    ) -> Reservation: ...


@dataclass(frozen=True)
class IdempotencyRecord:
    key: str
    reservation_id: ReservationId
    request_hash: str
    created_at: datetime


class IdempotencyStore(Protocol):
    def get(self, key: str, now: datetime) -> IdempotencyRecord | None: ...

    def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> IdempotencyRecord | None:
        """Store ``record`` unless its key is live; return the live record otherwise."""
        ...

    def release(self, key: str) -> None: ...


class OptimisticConcurrencyError(Exception):
    pass
