from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorops.application.use_cases.availability import GetAvailability
from floorops.domain.common.errors import InputValidationError
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.infrastructure.memory.store import (
    InMemoryFloorStore,
    InMemoryReservationRepository,
    InMemoryTableRepository,
)
from floorops.tools.seed import seeded_memory_store

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _use_case(store: InMemoryFloorStore) -> GetAvailability:
    return GetAvailability(
        table_repository=InMemoryTableRepository(store),
        reservation_repository=InMemoryReservationRepository(store),
    )


def _book(store: InMemoryFloorStore, table_id: str, start: str, end: str) -> None:
    reservation_id = ReservationId(f"res_{table_id}")
    store.reservations[reservation_id] = Reservation(
        reservation_id=reservation_id,
        table_ids=(TableId(table_id),),
        client_name="Sofia",
        party_size=2,
        date="2026-03-10",
        start_time=start,
        end_time=end,
        status=ReservationStatus.CONFIRMED,
        duration=90,
        notes="",
        created_at=NOW,
    )


def test_booked_table_is_excluded_and_rest_sorted_by_capacity() -> None:
    store = seeded_memory_store(NOW)
    _book(store, "tbl_p1", "20:00", "21:30")

    result = _use_case(store).execute(
        {"date": "2026-03-10", "partySize": 2, "startTime": "20:00", "areaPreference": "area_patio"}
    )

    suggested = [item.tableName for item in result.suggestedTables]
    alternatives = [item.tableName for item in result.alternatives]
    assert suggested == ["P2", "P3", "P4"]
    assert alternatives == ["P5", "P6", "P7"]
    assert "P1" not in suggested + alternatives


def test_slot_is_ninety_minutes() -> None:
    store = seeded_memory_store(NOW)
    _book(store, "tbl_p7", "21:30", "23:00")

    result = _use_case(store).execute(
        {"date": "2026-03-10", "partySize": 8, "startTime": "20:00", "areaPreference": "area_patio"}
    )

    assert [item.tableIds for item in result.suggestedTables] == [["tbl_p7"]]


def test_party_larger_than_every_table_has_no_suggestions() -> None:
    store = seeded_memory_store(NOW)

    result = _use_case(store).execute(
        {"date": "2026-03-10", "partySize": 9, "startTime": "20:00", "areaPreference": "area_bar"}
    )

    assert result.suggestedTables == []
    assert result.alternatives == []


def test_without_area_preference_all_areas_are_considered() -> None:
    store = seeded_memory_store(NOW)

    result = _use_case(store).execute({"date": "2026-03-10", "partySize": 10, "startTime": "19:00"})

    assert [item.tableName for item in result.suggestedTables] == ["Redonda VIP"]


@pytest.mark.parametrize(
    "query",
    [
        {"date": "2026-13-01", "partySize": 2, "startTime": "20:00"},
        {"date": "2026-03-10", "partySize": 0, "startTime": "20:00"},
        {"date": "2026-03-10", "partySize": 2, "startTime": "8pm"},
    ],
)
def test_invalid_query_is_rejected(query) -> None:
    with pytest.raises(InputValidationError):
        _use_case(seeded_memory_store(NOW)).execute(query)


def test_last_minute_of_the_day_has_no_slot() -> None:
    store = seeded_memory_store(NOW)
    _book(store, "tbl_b1", "22:00", "23:59")

    with pytest.raises(InputValidationError) as exc_info:
        _use_case(store).execute(
            {"date": "2026-03-10", "partySize": 2, "startTime": "23:59", "areaPreference": "area_bar"}
        )

    assert "startTime" in exc_info.value.details["errors"][0]["msg"]


def test_late_slot_is_cut_at_day_end_and_still_sees_bookings() -> None:
    store = seeded_memory_store(NOW)
    _book(store, "tbl_b1", "22:00", "23:59")

    result = _use_case(store).execute(
        {"date": "2026-03-10", "partySize": 2, "startTime": "23:58", "areaPreference": "area_bar"}
    )

    ids = [item.tableIds[0] for item in result.suggestedTables + result.alternatives]
    assert "tbl_b1" not in ids
    assert ids
