from __future__ import annotations

import os
from dataclasses import dataclass

from floorops.application.ports.repositories import (
    AreaRepository,
    IdempotencyStore,
    ReservationRepository,
    TableRepository,
)
from floorops.infrastructure.cache.idempotency_store import RedisIdempotencyStore
from floorops.infrastructure.db.repositories.floor_repo import (
    SqlAlchemyAreaRepository,
    SqlAlchemyTableRepository,
)
from floorops.infrastructure.db.repositories.reservation_repo import (
    SqlAlchemyReservationRepository,
)
from floorops.infrastructure.memory.store import (
    InMemoryAreaRepository,
    InMemoryFloorStore,
    InMemoryIdempotencyStore,
    InMemoryReservationRepository,
    InMemoryTableRepository,
)
from floorops.tools.seed import seeded_memory_store

MEMORY_BACKEND = "memory"
SQL_BACKEND = "sql"


@dataclass(frozen=True)
class Storage:
    areas: AreaRepository
    tables: TableRepository
    reservations: ReservationRepository
    idempotency: IdempotencyStore
    backend: str


def memory_storage(store: InMemoryFloorStore) -> Storage:
    return Storage(
        areas=InMemoryAreaRepository(store),
        tables=InMemoryTableRepository(store),
        reservations=InMemoryReservationRepository(store),
        idempotency=InMemoryIdempotencyStore(store),
        backend=MEMORY_BACKEND,
    )


def sql_storage() -> Storage:
    return Storage(
        areas=SqlAlchemyAreaRepository(),
        tables=SqlAlchemyTableRepository(),
        reservations=SqlAlchemyReservationRepository(),
        idempotency=RedisIdempotencyStore(),
        backend=SQL_BACKEND,
    )


def build_storage() -> Storage:
    backend = os.getenv("STORAGE_BACKEND", MEMORY_BACKEND).lower()
    if backend == SQL_BACKEND:
        return sql_storage()
    if backend == MEMORY_BACKEND:
        return memory_storage(seeded_memory_store())
    raise RuntimeError(f"unsupported STORAGE_BACKEND: {backend}")
