from __future__ import annotations

from typing import Any


class FloorError(Exception):
    """Base for every domain error that crosses the application boundary.

    Each subclass has a stable ``code``; ``details`` holds machine-readable
    context for clients (ids, versions, offending unit keys).
    """

    code = "FLOOR_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}


class InputValidationError(FloorError):
    code = "VALIDATION_ERROR"


class PastReservationError(FloorError):
    code = "PAST_RESERVATION"


class TableConflictError(FloorError):
    code = "TABLE_CONFLICT"


class VipUnitLimitExceededError(FloorError):
    code = "VIP_UNIT_LIMIT_EXCEEDED"


class CapacityExceededError(FloorError):
    code = "CAPACITY_EXCEEDED"


class IdempotencyKeyReuseError(FloorError):
    code = "IDEMPOTENCY_KEY_REUSE"


class InvalidTransitionError(FloorError):
    code = "INVALID_TRANSITION"

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            f"cannot transition reservation from status={current} to status={requested}",
            details={"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested


class ConcurrencyConflictError(FloorError):
    code = "CONCURRENCY_CONFLICT"


class AreaTableLimitError(FloorError):
    code = "AREA_TABLE_LIMIT_REACHED"


class NotFoundError(FloorError):
    code = "NOT_FOUND"


class AreaNotFoundError(NotFoundError):
    code = "AREA_NOT_FOUND"


class TableNotFoundError(NotFoundError):
    code = "TABLE_NOT_FOUND"


class ReservationNotFoundError(NotFoundError):
    code = "RESERVATION_NOT_FOUND"
