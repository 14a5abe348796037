from __future__ import annotations

import re
from datetime import date, datetime

DAY_END = "23:59"

_CLOCK_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def is_valid_clock(value: str) -> bool:
    return bool(_CLOCK_PATTERN.match(value))


def is_valid_date(value: str) -> bool:
    if not _DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def to_minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(clock: str, minutes: int, ceiling: str = DAY_END) -> str:
    """Shift an HH:mm clock forward, never past ``ceiling`` (no cross-midnight)."""
    return from_minutes(min(to_minutes(clock) + minutes, to_minutes(ceiling)))


def clock_of(instant: datetime) -> str:
    return instant.strftime("%H:%M")


def date_of(instant: datetime) -> str:
    return instant.date().isoformat()


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    # Half-open windows over zero-padded HH:mm, so string order is time order.
    return start_a < end_b and end_a > start_b
