from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from floorops.application.concurrency import KeyedLocks
from floorops.application.ports.repositories import OptimisticConcurrencyError
from floorops.application.use_cases.create_reservation import CreateReservation
from floorops.domain.area.entities import AreaName
from floorops.domain.common.errors import TableConflictError
from floorops.domain.common.ids import AreaId, ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.infrastructure.db.repositories.floor_repo import (
    SqlAlchemyAreaRepository,
    SqlAlchemyTableRepository,
)
from floorops.infrastructure.db.repositories.reservation_repo import (
    SqlAlchemyReservationRepository,
)
from floorops.infrastructure.memory.store import InMemoryFloorStore, InMemoryIdempotencyStore
from floorops.tools.seed import seed_database

SEEDED_AT = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_engine(sqlite_engine):
    seed_database(sqlite_engine, SEEDED_AT)
    return sqlite_engine


def _reservation(reservation_id: str, *table_ids: str, created_at: datetime = NOW) -> Reservation:
    return Reservation(
        reservation_id=ReservationId(reservation_id),
        table_ids=tuple(TableId(table_id) for table_id in table_ids),
        client_name="Iker",
        party_size=4,
        date="2026-03-10",
        start_time="20:00",
        end_time="21:30",
        status=ReservationStatus.PENDING,
        duration=90,
        notes="birthday",
        created_at=created_at,
    )


def test_seed_is_idempotent_and_keeps_moved_tables(seeded_engine) -> None:
    tables = SqlAlchemyTableRepository(seeded_engine)
    tables.update_position(TableId("tbl_t1"), 30, 40, expected_version=1, updated_at=NOW)

    seed_database(seeded_engine, NOW)

    moved = tables.get(TableId("tbl_t1"))
    assert moved is not None
    assert (moved.x, moved.y, moved.version) == (30, 40, 2)
    assert len(tables.list()) == 29


def test_areas_come_back_in_floor_order(seeded_engine) -> None:
    areas = SqlAlchemyAreaRepository(seeded_engine).list()

    assert [area.name for area in areas] == list(AreaName)
    assert SqlAlchemyAreaRepository(seeded_engine).get(AreaId("area_missing")) is None


def test_table_queries(seeded_engine) -> None:
    tables = SqlAlchemyTableRepository(seeded_engine)

    vip = tables.list(AreaId("area_vip"))

    assert [table.table_id for table in vip] == ["tbl_v1", "tbl_va", "tbl_vb"]
    assert tables.count_for_area(AreaId("area_lobby")) == 6
    assert vip[0].updated_at == SEEDED_AT


def test_position_update_is_compare_and_set(seeded_engine) -> None:
    tables = SqlAlchemyTableRepository(seeded_engine)

    moved = tables.update_position(TableId("tbl_t2"), 20, 25, expected_version=1, updated_at=NOW)

    assert moved.version == 2
    assert moved.updated_at == NOW
    with pytest.raises(OptimisticConcurrencyError):
        tables.update_position(TableId("tbl_t2"), 60, 60, expected_version=1, updated_at=NOW)
    current = tables.get(TableId("tbl_t2"))
    assert current is not None
    assert (current.x, current.y, current.version) == (20, 25, 2)


def test_reservation_round_trip_keeps_table_order(seeded_engine) -> None:
    reservations = SqlAlchemyReservationRepository(seeded_engine)
    reservations.add(_reservation("res_pair", "tbl_vb", "tbl_va"))

    loaded = reservations.get(ReservationId("res_pair"))

    assert loaded == _reservation("res_pair", "tbl_vb", "tbl_va")


def test_reservations_listed_by_creation(seeded_engine) -> None:
    reservations = SqlAlchemyReservationRepository(seeded_engine)
    reservations.add(_reservation("res_b", "tbl_t1", created_at=NOW + timedelta(minutes=5)))
    reservations.add(_reservation("res_a", "tbl_t2"))

    listed = reservations.list_for_date("2026-03-10")

    assert [item.reservation_id for item in listed] == ["res_a", "res_b"]
    assert reservations.list_for_date("2026-03-11") == []


def test_status_update(seeded_engine) -> None:
    reservations = SqlAlchemyReservationRepository(seeded_engine)
    reservations.add(_reservation("res_001", "tbl_t1"))

    updated = reservations.update_status(ReservationId("res_001"), ReservationStatus.CONFIRMED)

    assert updated.status == ReservationStatus.CONFIRMED
    with pytest.raises(RuntimeError):
        reservations.update_status(ReservationId("res_missing"), ReservationStatus.CONFIRMED)


def test_create_reservation_over_sql_repositories(seeded_engine) -> None:
    use_case = CreateReservation(
        table_repository=SqlAlchemyTableRepository(seeded_engine),
        reservation_repository=SqlAlchemyReservationRepository(seeded_engine),
        idempotency_store=InMemoryIdempotencyStore(InMemoryFloorStore()),
        locks=KeyedLocks(),
        clock=lambda: NOW,
    )
    payload = {
        "tableIds": ["tbl_va", "tbl_vb"],
        "clientName": "Grupo Ruiz",
        "partySize": 6,
        "date": "2026-03-10",
        "startTime": "20:00",
        "endTime": "22:00",
    }

    first = use_case.execute(payload, idempotency_key="sql-key-0001")
    replay = use_case.execute(payload, idempotency_key="sql-key-0001")

    assert replay.id == first.id
    stored = SqlAlchemyReservationRepository(seeded_engine).list_for_date("2026-03-10")
    assert [item.table_ids for item in stored] == [(TableId("tbl_va"), TableId("tbl_vb"))]


def test_guarded_add_rolls_back_when_guard_rejects(seeded_engine) -> None:
    reservations = SqlAlchemyReservationRepository(seeded_engine)
    reservations.add(_reservation("res_first", "tbl_t1"))
    seen: list[str] = []

    def reject(same_day: list[Reservation]) -> None:
        seen.extend(str(item.reservation_id) for item in same_day)
        raise TableConflictError("taken")

    with pytest.raises(TableConflictError):
        reservations.add_guarded(
            _reservation("res_second", "tbl_t1"),
            guard=reject,
            lock_table_ids=[TableId("tbl_t1")],
        )

    assert seen == ["res_first"]
    assert reservations.get(ReservationId("res_second")) is None


def test_guarded_add_commits_when_guard_accepts(seeded_engine) -> None:
    reservations = SqlAlchemyReservationRepository(seeded_engine)

    reservations.add_guarded(
        _reservation("res_pair", "tbl_va", "tbl_vb"),
        guard=lambda same_day: None,
        lock_table_ids=[TableId("tbl_vb"), TableId("tbl_va")],
    )

    stored = reservations.get(ReservationId("res_pair"))
    assert stored is not None
    assert stored.table_ids == (TableId("tbl_va"), TableId("tbl_vb"))


def test_workers_with_separate_locks_share_the_database_guard(seeded_engine) -> None:
    shared_idempotency = InMemoryIdempotencyStore(InMemoryFloorStore())

    def worker() -> CreateReservation:
        return CreateReservation(
            table_repository=SqlAlchemyTableRepository(seeded_engine),
            reservation_repository=SqlAlchemyReservationRepository(seeded_engine),
            idempotency_store=shared_idempotency,
            locks=KeyedLocks(),
            clock=lambda: NOW,
        )

    payload = {
        "tableIds": ["tbl_t1"],
        "clientName": "Lucia",
        "partySize": 2,
        "date": "2026-03-10",
        "startTime": "20:00",
        "endTime": "21:30",
    }
    first = worker().execute(payload, idempotency_key="worker-key-1")
    replay = worker().execute(payload, idempotency_key="worker-key-1")

    with pytest.raises(TableConflictError):
        worker().execute(
            {**payload, "startTime": "21:00", "endTime": "22:00"},
            idempotency_key="worker-key-2",
        )

    assert replay.id == first.id
    stored = SqlAlchemyReservationRepository(seeded_engine).list_for_date("2026-03-10")
    assert [str(item.reservation_id) for item in stored] == [first.id]
