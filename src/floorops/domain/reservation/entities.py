from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from floorops.domain.common.errors import InvalidTransitionError
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.time_window import is_valid_clock, is_valid_date

WALK_IN_DURATION = 0


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.CONFIRMED})

_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.PENDING: frozenset(
        {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.CONFIRMED: frozenset(
        {ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
    ),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
    ReservationStatus.NO_SHOW: frozenset(),
}


def can_transition(current: ReservationStatus, requested: ReservationStatus) -> bool:
    if current == requested:
        return True
    return requested in _TRANSITIONS[current]


@dataclass(frozen=True)
class Reservation:
    reservation_id: ReservationId
    table_ids: tuple[TableId, ...]
    client_name: str
    party_size: int
    date: str
    start_time: str
    end_time: str
    status: ReservationStatus
    duration: int
    notes: str
    created_at: datetime

    def __post_init__(self) -> None:
        if not self.table_ids:
            raise ValueError("reservation must reference at least one table")
        if self.party_size < 1:
            raise ValueError("party_size must be >= 1")
        if self.duration < 0:
            raise ValueError("duration must be >= 0")
        if not is_valid_date(self.date):
            raise ValueError("date must be YYYY-MM-DD")
        if not is_valid_clock(self.start_time) or not is_valid_clock(self.end_time):
            raise ValueError("start_time and end_time must be HH:mm")
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_walk_in(self) -> bool:
        return self.duration == WALK_IN_DURATION

    def uses_any(self, table_ids: tuple[TableId, ...] | list[TableId]) -> bool:
        return any(table_id in table_ids for table_id in self.table_ids)

    def transition_to(self, requested: ReservationStatus) -> Reservation:
        if requested == self.status:
            return self
        if not can_transition(self.status, requested):
            raise InvalidTransitionError(current=self.status.value, requested=requested.value)
        return replace(self, status=requested)
