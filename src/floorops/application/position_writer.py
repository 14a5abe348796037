from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Callable

from floorops.application.dto.requests import UpdateTablePositionRequest
from floorops.application.dto.responses import TableResponse
from floorops.application.use_cases.update_table_position import UpdateTablePosition
from floorops.domain.common.errors import ConcurrencyConflictError, FloorError
from floorops.domain.common.ids import TableId

logger = logging.getLogger(__name__)

ConflictHandler = Callable[[TableId, ConcurrencyConflictError], None]


class CoalescingPositionWriter:
    """Per-table write queue for drag updates.

    At most one write per table is in flight; while it runs, newer requests
    for the same table replace each other so only the latest one is sent.
    Requests that still expect a version produced by this writer's own
    earlier writes are moved onto the newest version before dispatch.
    """

    def __init__(
        self,
        update_position: UpdateTablePosition,
        executor: Executor | None = None,
        on_conflict: ConflictHandler | None = None,
    ) -> None:
        self._update_position = update_position
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=4, thread_name_prefix="position-writer"
        )
        self._on_conflict = on_conflict
        self._lock = threading.RLock()
        self._pending: dict[TableId, UpdateTablePositionRequest] = {}
        self._in_flight: dict[TableId, Future] = {}
        self._own_versions: dict[TableId, tuple[int, int]] = {}
        self._latest: dict[TableId, TableResponse] = {}

    def submit(self, table_id: TableId, request: UpdateTablePositionRequest) -> None:
        with self._lock:
            self._pending[table_id] = request
            if table_id not in self._in_flight:
                self._dispatch(table_id)

    def latest(self, table_id: TableId) -> TableResponse | None:
        with self._lock:
            return self._latest.get(table_id)

    def flush(self, timeout: float | None = None) -> None:
        """Wait until no write is queued or in flight.

        Raises ``TimeoutError`` when ``timeout`` seconds pass first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                futures = list(self._in_flight.values())
            if not futures:
                return
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                raise TimeoutError(f"{len(futures)} position writes still in flight")
            wait(futures, timeout=remaining)

    def close(self) -> None:
        self.flush()
        if self._owns_executor and isinstance(self._executor, ThreadPoolExecutor):
            self._executor.shutdown(wait=True)

    def _dispatch(self, table_id: TableId) -> None:
        request = self._pending.pop(table_id)
        own = self._own_versions.get(table_id)
        expected = request.expected_version
        if own is not None and expected is not None and own[0] <= expected < own[1]:
            request = request.model_copy(update={"expected_version": own[1]})

        future = self._executor.submit(self._write, table_id, request)
        self._in_flight[table_id] = future
        future.add_done_callback(lambda done: self._finish(table_id, done))

    def _write(self, table_id: TableId, request: UpdateTablePositionRequest) -> None:
        try:
            result = self._update_position.execute(table_id, request)
        except ConcurrencyConflictError as exc:
            self._drop(table_id)
            logger.warning(
                "table_position_conflict",
                extra={"table_id": str(table_id), "error_code": exc.code},
            )
            if self._on_conflict is not None:
                self._on_conflict(table_id, exc)
            return
        except FloorError as exc:
            self._drop(table_id)
            logger.warning(
                "table_position_write_failed",
                extra={"table_id": str(table_id), "error_code": exc.code},
            )
            return

        with self._lock:
            self._latest[table_id] = result
            base = self._own_versions.get(table_id, (result.version - 1, result.version))[0]
            self._own_versions[table_id] = (base, result.version)

    def _drop(self, table_id: TableId) -> None:
        with self._lock:
            self._pending.pop(table_id, None)
            self._own_versions.pop(table_id, None)

    def _finish(self, table_id: TableId, done: Future) -> None:
        error = done.exception()
        if error is not None:
            logger.error(
                "table_position_write_crashed",
                exc_info=error,
                extra={"table_id": str(table_id)},
            )
        with self._lock:
            self._in_flight.pop(table_id, None)
            if table_id in self._pending:
                self._dispatch(table_id)
