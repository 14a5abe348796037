from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta

from floorops.application.ports.repositories import (
    AreaRepository,
    IdempotencyRecord,
    IdempotencyStore,
    OptimisticConcurrencyError,
    ReservationRepository,
    TableRepository,
)
from floorops.domain.area.entities import Area
from floorops.domain.common.ids import AreaId, ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import Table


@dataclass
class InMemoryFloorStore:
    areas: dict[AreaId, Area] = field(default_factory=dict)
    tables: dict[TableId, Table] = field(default_factory=dict)
    reservations: dict[ReservationId, Reservation] = field(default_factory=dict)
    idempotency: dict[str, tuple[IdempotencyRecord, int]] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemoryAreaRepository(AreaRepository):
    def __init__(self, store: InMemoryFloorStore) -> None:
        self._store = store

    def list(self) -> list[Area]:
        with self._store.lock:
            return list(self._store.areas.values())

    def get(self, area_id: AreaId) -> Area | None:
        with self._store.lock:
            return self._store.areas.get(area_id)


class InMemoryTableRepository(TableRepository):
    def __init__(self, store: InMemoryFloorStore) -> None:
        self._store = store

    def list(self, area_id: AreaId | None = None) -> list[Table]:
        with self._store.lock:
            tables = list(self._store.tables.values())
        if area_id is None:
            return tables
        return [table for table in tables if table.area_id == area_id]

    def get(self, table_id: TableId) -> Table | None:
        with self._store.lock:
            return self._store.tables.get(table_id)

    def add(self, table: Table) -> None:
        with self._store.lock:
            if table.table_id in self._store.tables:
                raise ValueError(f"table {table.table_id} already exists")
            self._store.tables[table.table_id] = table

    def count_for_area(self, area_id: AreaId) -> int:
        return len(self.list(area_id))

    def update_position(
        self,
        table_id: TableId,
        x: float,
        y: float,
        expected_version: int,
        updated_at: datetime,
    ) -> Table:
        with self._store.lock:
            current = self._store.tables.get(table_id)
            if current is None or current.version != expected_version:
                raise OptimisticConcurrencyError(f"table {table_id} version conflict")
            moved = current.move_to(x, y, updated_at)
            self._store.tables[table_id] = moved
            return moved


class InMemoryReservationRepository(ReservationRepository):
    def __init__(self, store: InMemoryFloorStore) -> None:
        self._store = store

    def list_for_date(self, date: str) -> list[Reservation]:
        with self._store.lock:
            return [item for item in self._store.reservations.values() if item.date == date]

    def get(self, reservation_id: ReservationId) -> Reservation | None:
        with self._store.lock:
            return self._store.reservations.get(reservation_id)

    def add(self, reservation: Reservation) -> None:
        with self._store.lock:
            if reservation.reservation_id in self._store.reservations:
                raise ValueError(f"reservation {reservation.reservation_id} already exists")
            self._store.reservations[reservation.reservation_id] = reservation

    def add_guarded(
        self,
        reservation: Reservation,
        guard: Callable[[list[Reservation]], None],
        lock_table_ids: Iterable[TableId] = (),
    ) -> None:
        with self._store.lock:
            guard(self.list_for_date(reservation.date))
            self.add(reservation)

    def update_status(
        self,
        reservation_id: ReservationId,
        status: ReservationStatus,
    ) -> Reservation:
        with self._store.lock:
            current = self._store.reservations.get(reservation_id)
            if current is None:
                raise RuntimeError(f"reservation {reservation_id} not found for status update")
            updated = replace(current, status=status)
            self._store.reservations[reservation_id] = updated
            return updated


class InMemoryIdempotencyStore(IdempotencyStore):
    """Idempotency records with expiry by ``createdAt + ttl``.

    Every claim sweeps expired records so keys that are never retried do
    not accumulate.
    """

    def __init__(self, store: InMemoryFloorStore) -> None:
        self._store = store

    def get(self, key: str, now: datetime) -> IdempotencyRecord | None:
        with self._store.lock:
            entry = self._store.idempotency.get(key)
            if entry is None:
                return None
            record, ttl_seconds = entry
            if _expired(record, ttl_seconds, now):
                del self._store.idempotency[key]
                return None
            return record

    def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> IdempotencyRecord | None:
        with self._store.lock:
            self._evict_expired(record.created_at)
            entry = self._store.idempotency.get(record.key)
            if entry is not None:
                return entry[0]
            self._store.idempotency[record.key] = (record, ttl_seconds)
            return None

    def release(self, key: str) -> None:
        with self._store.lock:
            self._store.idempotency.pop(key, None)

    def _evict_expired(self, now: datetime) -> None:
        expired = [
            key
            for key, (record, ttl_seconds) in self._store.idempotency.items()
            if _expired(record, ttl_seconds, now)
        ]
        for key in expired:
            del self._store.idempotency[key]


def _expired(record: IdempotencyRecord, ttl_seconds: int, now: datetime) -> bool:
    return now >= record.created_at + timedelta(seconds=ttl_seconds)
