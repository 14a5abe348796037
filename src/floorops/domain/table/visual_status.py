from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from floorops.domain.reservation.entities import Reservation
from floorops.domain.reservation.time_window import clock_of, date_of
from floorops.domain.table.entities import Table


class TableVisualStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED_FUTURE = "reserved_future"
    RESERVED_ACTIVE = "reserved_active"
    VIP_COMBINED = "vip_combined"


@dataclass(frozen=True)
class TableStatusView:
    table: Table
    status: TableVisualStatus
    reservation: Reservation | None = None


def compute_visual_status(
    table: Table,
    reservations: Iterable[Reservation],
    now: datetime,
) -> TableStatusView:
    """Derive the floor-plan status of ``table`` at the wall-clock instant ``now``.

    Candidates are today's active reservations on the table, taken in input
    order; the first one that matches decides the status.
    """
    today = date_of(now)
    current = clock_of(now)

    for reservation in reservations:
        if reservation.date != today or not reservation.is_active:
            continue
        if table.table_id not in reservation.table_ids:
            continue

        if reservation.is_walk_in:
            return TableStatusView(table, TableVisualStatus.OCCUPIED, reservation)
        if reservation.start_time <= current < reservation.end_time:
            if table.is_vip and len(reservation.table_ids) > 1:
                return TableStatusView(table, TableVisualStatus.VIP_COMBINED, reservation)
            return TableStatusView(table, TableVisualStatus.RESERVED_ACTIVE, reservation)
        if reservation.start_time > current:
            return TableStatusView(table, TableVisualStatus.RESERVED_FUTURE, reservation)

    return TableStatusView(table, TableVisualStatus.AVAILABLE)
