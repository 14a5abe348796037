from __future__ import annotations

import json
from datetime import datetime

import redis

from floorops.application.ports.repositories import IdempotencyRecord, IdempotencyStore
from floorops.domain.common.ids import ReservationId
from floorops.infrastructure.cache.redis_client import get_redis_client

KEY_PREFIX = "idempotency:reservations:"


class RedisIdempotencyStore(IdempotencyStore):
    """Idempotency records as JSON strings; Redis expiry enforces the TTL.

    Claims use ``SET NX`` so exactly one worker owns a key until it expires
    or is released. The client is expected to decode responses to ``str``.
    """

    def __init__(self, client: redis.Redis | None = None, timeout_seconds: float = 1.0) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds

    def _redis(self) -> redis.Redis:
        if self._client is not None:
            return self._client
        return get_redis_client(timeout_seconds=self._timeout_seconds)

    def get(self, key: str, now: datetime) -> IdempotencyRecord | None:
        value = self._redis().get(f"{KEY_PREFIX}{key}")
        if value is None:
            return None
        payload = json.loads(value)
        return IdempotencyRecord(
            key=key,
            reservation_id=ReservationId(payload["reservationId"]),
            request_hash=payload["requestHash"],
            created_at=datetime.fromisoformat(payload["createdAt"]),
        )

    def claim(self, record: IdempotencyRecord, ttl_seconds: int) -> IdempotencyRecord | None:
        payload = {
            "reservationId": str(record.reservation_id),
            "requestHash": record.request_hash,
            "createdAt": record.created_at.isoformat(),
        }
        value = json.dumps(payload, separators=(",", ":"))
        while True:
            stored = self._redis().set(
                name=f"{KEY_PREFIX}{record.key}",
                value=value,
                ex=ttl_seconds,
                nx=True,
            )
            if stored:
                return None
            existing = self.get(record.key, record.created_at)
            if existing is not None:
                return existing
            # The holder expired between SET and GET; claim again.

    def release(self, key: str) -> None:
        self._redis().delete(f"{KEY_PREFIX}{key}")
