from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Callable

Clock = Callable[[], datetime]


def system_clock(tz: tzinfo) -> Clock:
    def now() -> datetime:
        return datetime.now(tz)

    return now
