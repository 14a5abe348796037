from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorops.domain.common.errors import InvalidTransitionError
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus, can_transition
from floorops.domain.reservation.rules import find_table_conflict, has_table_overlap
from floorops.domain.reservation.time_window import add_minutes, is_valid_date, overlaps


def _reservation(
    reservation_id: str = "res_001",
    table_ids: tuple[str, ...] = ("tbl_t1",),
    start_time: str = "13:00",
    end_time: str = "14:30",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    date: str = "2026-03-10",
) -> Reservation:
    return Reservation(
        reservation_id=ReservationId(reservation_id),
        table_ids=tuple(TableId(table_id) for table_id in table_ids),
        client_name="Ana",
        party_size=2,
        date=date,
        start_time=start_time,
        end_time=end_time,
        status=status,
        duration=90,
        notes="",
        created_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    ("window_a", "window_b", "expected"),
    [
        (("13:00", "14:30"), ("14:00", "15:00"), True),
        (("13:00", "14:30"), ("14:30", "15:00"), False),
        (("13:00", "14:30"), ("12:00", "13:00"), False),
        (("13:00", "14:30"), ("13:30", "14:00"), True),
        (("09:05", "10:00"), ("09:00", "09:10"), True),
    ],
)
def test_overlap_is_half_open_and_symmetric(window_a, window_b, expected) -> None:
    assert overlaps(*window_a, *window_b) is expected
    assert overlaps(*window_b, *window_a) is expected


def test_add_minutes_stops_at_end_of_day() -> None:
    assert add_minutes("20:00", 90) == "21:30"
    assert add_minutes("23:00", 90) == "23:59"


def test_is_valid_date_rejects_non_calendar_dates() -> None:
    assert is_valid_date("2026-02-28")
    assert not is_valid_date("2026-02-30")
    assert not is_valid_date("2026-2-1")


def test_conflict_found_for_shared_table_in_overlapping_window() -> None:
    existing = [_reservation()]

    conflict = find_table_conflict(
        existing, (TableId("tbl_t1"),), "2026-03-10", "14:00", "15:00"
    )

    assert conflict is not None
    assert conflict.reservation_id == "res_001"


def test_no_conflict_for_adjacent_window_other_day_or_other_table() -> None:
    existing = [_reservation()]

    assert not has_table_overlap(existing, (TableId("tbl_t1"),), "2026-03-10", "14:30", "16:00")
    assert not has_table_overlap(existing, (TableId("tbl_t1"),), "2026-03-11", "13:00", "14:00")
    assert not has_table_overlap(existing, (TableId("tbl_t2"),), "2026-03-10", "13:00", "14:00")


def test_inactive_reservations_never_conflict() -> None:
    existing = [
        _reservation("res_cancelled", status=ReservationStatus.CANCELLED),
        _reservation("res_completed", status=ReservationStatus.COMPLETED),
        _reservation("res_no_show", status=ReservationStatus.NO_SHOW),
    ]

    assert not has_table_overlap(existing, (TableId("tbl_t1"),), "2026-03-10", "13:00", "14:00")


def test_excluded_reservation_is_ignored() -> None:
    existing = [_reservation()]

    assert not has_table_overlap(
        existing,
        (TableId("tbl_t1"),),
        "2026-03-10",
        "13:00",
        "14:00",
        exclude_id=ReservationId("res_001"),
    )


def test_multi_table_reservation_conflicts_on_any_shared_table() -> None:
    existing = [_reservation(table_ids=("tbl_va", "tbl_vb"))]

    assert has_table_overlap(existing, (TableId("tbl_vb"),), "2026-03-10", "14:00", "15:00")


@pytest.mark.parametrize(
    ("current", "requested", "allowed"),
    [
        (ReservationStatus.PENDING, ReservationStatus.CONFIRMED, True),
        (ReservationStatus.PENDING, ReservationStatus.CANCELLED, True),
        (ReservationStatus.PENDING, ReservationStatus.NO_SHOW, True),
        (ReservationStatus.PENDING, ReservationStatus.COMPLETED, False),
        (ReservationStatus.CONFIRMED, ReservationStatus.COMPLETED, True),
        (ReservationStatus.CONFIRMED, ReservationStatus.PENDING, False),
        (ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, False),
        (ReservationStatus.CANCELLED, ReservationStatus.CONFIRMED, False),
        (ReservationStatus.NO_SHOW, ReservationStatus.CONFIRMED, False),
        (ReservationStatus.COMPLETED, ReservationStatus.COMPLETED, True),
    ],
)
def test_status_machine(current, requested, allowed) -> None:
    assert can_transition(current, requested) is allowed


def test_transition_to_returns_updated_copy() -> None:
    reservation = _reservation(status=ReservationStatus.PENDING)

    confirmed = reservation.transition_to(ReservationStatus.CONFIRMED)

    assert confirmed.status == ReservationStatus.CONFIRMED
    assert reservation.status == ReservationStatus.PENDING


def test_same_status_transition_is_a_no_op() -> None:
    reservation = _reservation(status=ReservationStatus.COMPLETED)

    assert reservation.transition_to(ReservationStatus.COMPLETED) is reservation


def test_invalid_transition_reports_both_statuses() -> None:
    reservation = _reservation(status=ReservationStatus.COMPLETED)

    with pytest.raises(InvalidTransitionError) as exc_info:
        reservation.transition_to(ReservationStatus.CANCELLED)

    assert exc_info.value.details == {"current": "completed", "requested": "cancelled"}


def test_reservation_requires_start_before_end() -> None:
    with pytest.raises(ValueError):
        _reservation(start_time="14:00", end_time="14:00")


def test_reservation_requires_tables() -> None:
    with pytest.raises(ValueError):
        _reservation(table_ids=())
