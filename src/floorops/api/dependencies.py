from __future__ import annotations

import os
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo

from starlette.requests import Request

from floorops.application.clock import Clock, system_clock
from floorops.application.concurrency import KeyedLocks
from floorops.domain.reservation.rules import ReservationRules
from floorops.infrastructure.storage import Storage


def restaurant_timezone() -> tzinfo:
    name = os.getenv("RESTAURANT_TIMEZONE", "UTC").strip() or "UTC"
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def restaurant_clock() -> Clock:
    return system_clock(restaurant_timezone())


def reservation_rules() -> ReservationRules:
    raw_value = os.getenv("VIP_UNIT_CAP", "2")
    try:
        cap = int(raw_value)
    except ValueError as exc:
        raise RuntimeError(f"VIP_UNIT_CAP must be an integer, got {raw_value!r}") from exc
    return ReservationRules(vip_unit_cap=cap)


def storage_of(request: Request) -> Storage:
    return request.app.state.storage


def locks_of(request: Request) -> KeyedLocks:
    return request.app.state.locks


def clock_of(request: Request) -> Clock:
    return request.app.state.clock


def rules_of(request: Request) -> ReservationRules:
    return request.app.state.rules
