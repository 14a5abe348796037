from __future__ import annotations

import hashlib
import json
from datetime import date as date_cls
from datetime import datetime, time
from typing import Any
from uuid import uuid4

from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import CreateReservationRequest, parse_request
from floorops.application.dto.responses import ReservationResponse
from floorops.application.mappers.floor_mapper import to_reservation_response
from floorops.application.metrics.floor_activity import (
    record_idempotent_replay,
    record_reservation_created,
    record_reservation_rejected,
)
from floorops.application.ports.repositories import (
    IdempotencyRecord,
    IdempotencyStore,
    ReservationRepository,
    TableRepository,
)
from floorops.domain.common.errors import (
    ConcurrencyConflictError,
    FloorError,
    IdempotencyKeyReuseError,
    InputValidationError,
    PastReservationError,
    TableConflictError,
)
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation, ReservationStatus
from floorops.domain.reservation.rules import ReservationRules, check_vip_rules, find_table_conflict
from floorops.domain.reservation.time_window import to_minutes
from floorops.domain.table.entities import Table

IDEMPOTENCY_TTL_SECONDS = 600
IDEMPOTENCY_KEY_MIN_LENGTH = 8
IDEMPOTENCY_KEY_MAX_LENGTH = 128


class CreateReservation:
    def __init__(
        self,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
        idempotency_store: IdempotencyStore,
        locks: KeyedLocks,
        clock: Clock,
        rules: ReservationRules | None = None,
    ) -> None:
        self._table_repository = table_repository
        self._reservation_repository = reservation_repository
        self._idempotency_store = idempotency_store
        self._locks = locks
        self._clock = clock
        self._rules = rules or ReservationRules()

    def execute(self, payload: Any, idempotency_key: str | None) -> ReservationResponse:
        try:
            return self._execute(payload, idempotency_key)
        except FloorError as exc:
            record_reservation_rejected(exc.code)
            raise

    def _execute(self, payload: Any, idempotency_key: str | None) -> ReservationResponse:
        request_dto = parse_request(CreateReservationRequest, payload)
        key = _validated_idempotency_key(idempotency_key)
        table_ids = tuple(dict.fromkeys(TableId(table_id) for table_id in request_dto.table_ids))
        tables_by_id = {table.table_id: table for table in self._table_repository.list()}
        unknown = [str(table_id) for table_id in table_ids if table_id not in tables_by_id]
        if unknown:
            raise InputValidationError(
                "reservation references unknown tables",
                details={"unknownTableIds": unknown},
            )

        duration = _effective_duration(request_dto)
        payload_hash = _request_hash(request_dto, duration)

        with self._locks.hold(f"reservations:{request_dto.date}", f"idempotency:{key}"):
            now = self._clock()
            reservation = Reservation(
                reservation_id=ReservationId(f"res_{uuid4().hex[:12]}"),
                table_ids=table_ids,
                client_name=request_dto.client_name,
                party_size=request_dto.party_size,
                date=request_dto.date,
                start_time=request_dto.start_time,
                end_time=request_dto.end_time,
                status=ReservationStatus(request_dto.status),
                duration=duration,
                notes=request_dto.notes,
                created_at=now,
            )

            record = self._idempotency_store.claim(
                IdempotencyRecord(
                    key=key,
                    reservation_id=reservation.reservation_id,
                    request_hash=payload_hash,
                    created_at=now,
                ),
                ttl_seconds=IDEMPOTENCY_TTL_SECONDS,
            )
            if record is not None:
                return self._replay(record, key, payload_hash)

            try:
                if duration > 0 and _starts_before(request_dto.date, request_dto.start_time, now):
                    raise PastReservationError(
                        "reservations in the past are not allowed",
                        details={"date": request_dto.date, "startTime": request_dto.start_time},
                    )
                self._reservation_repository.add_guarded(
                    reservation,
                    guard=lambda same_day: self._check_bookable(
                        same_day, reservation, tables_by_id
                    ),
                    lock_table_ids=_lock_scope(table_ids, tables_by_id),
                )
            except Exception:
                self._idempotency_store.release(key)
                raise

        record_reservation_created(reservation.status.value)
        return to_reservation_response(reservation)

    def _replay(
        self,
        record: IdempotencyRecord,
        key: str,
        payload_hash: str,
    ) -> ReservationResponse:
        if record.request_hash != payload_hash:
            raise IdempotencyKeyReuseError(
                f"idempotency key reused with a different payload: {key}",
                details={"reservationId": str(record.reservation_id)},
            )
        previous = self._reservation_repository.get(record.reservation_id)
        if previous is None:
            raise ConcurrencyConflictError(
                f"a request with idempotency key {key} is still in progress",
                details={"reservationId": str(record.reservation_id)},
            )
        record_idempotent_replay()
        return to_reservation_response(previous)

    def _check_bookable(
        self,
        same_day: list[Reservation],
        reservation: Reservation,
        tables_by_id: dict[TableId, Table],
    ) -> None:
        conflict = find_table_conflict(
            same_day,
            reservation.table_ids,
            reservation.date,
            reservation.start_time,
            reservation.end_time,
        )
        if conflict is not None:
            raise TableConflictError(
                "table is already booked in that time window",
                details={
                    "conflictingReservationId": str(conflict.reservation_id),
                    "tableIds": [str(table_id) for table_id in reservation.table_ids],
                },
            )

        check_vip_rules(
            same_day,
            tables_by_id,
            reservation.table_ids,
            reservation.party_size,
            reservation.date,
            reservation.start_time,
            reservation.end_time,
            self._rules,
        )


def _lock_scope(table_ids: tuple[TableId, ...], tables_by_id: dict[TableId, Table]) -> list[TableId]:
    # The VIP cap spans every VIP table, so a VIP booking locks all of them.
    scope = set(table_ids)
    if any(tables_by_id[table_id].is_vip for table_id in table_ids):
        scope.update(table.table_id for table in tables_by_id.values() if table.is_vip)
    return sorted(scope)


def _validated_idempotency_key(idempotency_key: str | None) -> str:
    key = (idempotency_key or "").strip()
    if not IDEMPOTENCY_KEY_MIN_LENGTH <= len(key) <= IDEMPOTENCY_KEY_MAX_LENGTH:
        raise InputValidationError(
            "Idempotency-Key must be between "
            f"{IDEMPOTENCY_KEY_MIN_LENGTH} and {IDEMPOTENCY_KEY_MAX_LENGTH} characters",
            details={"field": "Idempotency-Key"},
        )
    return key


def _effective_duration(request_dto: CreateReservationRequest) -> int:
    if request_dto.duration is not None:
        return request_dto.duration
    return to_minutes(request_dto.end_time) - to_minutes(request_dto.start_time)


def _starts_before(day: str, start_time: str, now: datetime) -> bool:
    hours, minutes = (int(part) for part in start_time.split(":"))
    starts_at = datetime.combine(
        date_cls.fromisoformat(day), time(hours, minutes), tzinfo=now.tzinfo
    )
    return starts_at < now


def _request_hash(request_dto: CreateReservationRequest, duration: int) -> str:
    normalized_payload = request_dto.model_dump(mode="json", by_alias=True, exclude_none=False)
    normalized_payload["tableIds"] = sorted(set(request_dto.table_ids))
    normalized_payload["duration"] = duration
    canonical = json.dumps(normalized_payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
