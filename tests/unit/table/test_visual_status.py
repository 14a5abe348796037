from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorops.domain.common.ids import AreaId, ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.table.entities import Table, TableType
from floorops.domain.table.visual_status import TableVisualStatus, compute_visual_status


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 10, hour, minute, tzinfo=timezone.utc)


def _table(table_id: str = "tbl_t1", is_vip: bool = False) -> Table:
    return Table(
        table_id=TableId(table_id),
        area_id=AreaId("area_vip" if is_vip else "area_terraza"),
        capacity=4,
        type=TableType.SQUARE if is_vip else TableType.STANDARD,
        name=table_id.upper(),
        is_vip=is_vip,
        can_merge=is_vip,
        merge_group="VIP_AB" if is_vip else None,
        x=10,
        y=10,
        version=1,
        updated_at=_at(8),
    )


def _reservation(
    table_ids: tuple[str, ...] = ("tbl_t1",),
    start: str = "13:00",
    end: str = "14:30",
    duration: int = 90,
    status: ReservationStatus = ReservationStatus.CONFIRMED,
    date: str = "2026-03-10",
    reservation_id: str = "res_001",
) -> Reservation:
    return Reservation(
        reservation_id=ReservationId(reservation_id),
        table_ids=tuple(TableId(table_id) for table_id in table_ids),
        client_name="Eva",
        party_size=2,
        date=date,
        start_time=start,
        end_time=end,
        status=status,
        duration=duration,
        notes="",
        created_at=_at(8),
    )


def test_active_window_is_reserved_active() -> None:
    view = compute_visual_status(_table(), [_reservation()], _at(13, 20))

    assert view.status == TableVisualStatus.RESERVED_ACTIVE
    assert view.reservation is not None


def test_later_booking_is_reserved_future() -> None:
    assert compute_visual_status(_table(), [_reservation()], _at(12)).status == (
        TableVisualStatus.RESERVED_FUTURE
    )


def test_finished_booking_leaves_table_available() -> None:
    view = compute_visual_status(_table(), [_reservation()], _at(15))

    assert view.status == TableVisualStatus.AVAILABLE
    assert view.reservation is None


def test_end_time_is_exclusive() -> None:
    assert compute_visual_status(_table(), [_reservation()], _at(14, 30)).status == (
        TableVisualStatus.AVAILABLE
    )


def test_walk_in_is_occupied_regardless_of_time() -> None:
    walk_in = _reservation(start="10:00", end="23:59", duration=0)

    assert compute_visual_status(_table(), [walk_in], _at(9)).status == TableVisualStatus.OCCUPIED


def test_combined_vip_booking_is_vip_combined() -> None:
    combined = _reservation(table_ids=("tbl_va", "tbl_vb"))

    view = compute_visual_status(_table("tbl_va", is_vip=True), [combined], _at(13, 20))

    assert view.status == TableVisualStatus.VIP_COMBINED


def test_single_vip_booking_is_reserved_active() -> None:
    single = _reservation(table_ids=("tbl_va",))

    view = compute_visual_status(_table("tbl_va", is_vip=True), [single], _at(13, 20))

    assert view.status == TableVisualStatus.RESERVED_ACTIVE


def test_inactive_and_other_day_bookings_are_ignored() -> None:
    reservations = [
        _reservation(status=ReservationStatus.CANCELLED),
        _reservation(date="2026-03-11", reservation_id="res_002"),
        _reservation(table_ids=("tbl_t2",), reservation_id="res_003"),
    ]

    assert compute_visual_status(_table(), reservations, _at(13, 20)).status == (
        TableVisualStatus.AVAILABLE
    )


def test_first_matching_reservation_wins() -> None:
    evening = _reservation(start="20:00", end="21:30", reservation_id="res_evening")
    lunch = _reservation(reservation_id="res_lunch")

    view = compute_visual_status(_table(), [evening, lunch], _at(13, 20))

    assert view.status == TableVisualStatus.RESERVED_FUTURE
    assert view.reservation is not None
    assert view.reservation.reservation_id == "res_evening"
