from __future__ import annotations

import logging
import sys
from concurrent.futures import Executor, Future
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import UpdateTablePositionRequest
from floorops.application.position_writer import CoalescingPositionWriter
from floorops.application.use_cases.update_table_position import UpdateTablePosition
from floorops.domain.common.errors import ConcurrencyConflictError
from floorops.domain.common.ids import TableId
from floorops.infrastructure.memory.store import (
    InMemoryAreaRepository,
    InMemoryFloorStore,
    InMemoryTableRepository,
)
from floorops.tools.seed import seeded_memory_store

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
TABLE = TableId("tbl_t3")


class ManualExecutor(Executor):
    """Runs submitted work only when the test says so."""

    def __init__(self) -> None:
        self.queue: list[tuple[Future, object, tuple]] = []

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        self.queue.append((future, fn, args))
        return future

    def run_all(self) -> int:
        executed = 0
        while self.queue:
            future, fn, args = self.queue.pop(0)
            try:
                result = fn(*args)  # type: ignore[operator]
            except Exception as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)
            executed += 1
        return executed


def _use_case(store: InMemoryFloorStore) -> UpdateTablePosition:
    return UpdateTablePosition(
        table_repository=InMemoryTableRepository(store),
        area_repository=InMemoryAreaRepository(store),
        locks=KeyedLocks(),
        clock=lambda: NOW,
    )


def _move(x: float, y: float, expected_version: int | None = 1) -> UpdateTablePositionRequest:
    return UpdateTablePositionRequest(x=x, y=y, expected_version=expected_version)


def test_only_latest_pending_request_is_written() -> None:
    store = seeded_memory_store(NOW)
    executor = ManualExecutor()
    writer = CoalescingPositionWriter(_use_case(store), executor=executor)

    writer.submit(TABLE, _move(20, 20))
    writer.submit(TABLE, _move(25, 25))
    writer.submit(TABLE, _move(30, 30))

    assert len(executor.queue) == 1
    assert executor.run_all() == 2
    table = store.tables[TABLE]
    assert (table.x, table.y) == (30, 30)
    assert table.version == 3


def test_requests_based_on_own_writes_are_rebased() -> None:
    store = seeded_memory_store(NOW)
    executor = ManualExecutor()
    conflicts: list[ConcurrencyConflictError] = []
    writer = CoalescingPositionWriter(
        _use_case(store),
        executor=executor,
        on_conflict=lambda table_id, exc: conflicts.append(exc),
    )

    writer.submit(TABLE, _move(20, 20))
    executor.run_all()
    writer.submit(TABLE, _move(40, 40))
    executor.run_all()

    assert conflicts == []
    latest = writer.latest(TABLE)
    assert latest is not None
    assert (latest.x, latest.y, latest.version) == (40, 40, 3)


def test_foreign_write_conflicts_and_drops_pending(caplog) -> None:
    store = seeded_memory_store(NOW)
    executor = ManualExecutor()
    conflicts: list[tuple[TableId, ConcurrencyConflictError]] = []
    writer = CoalescingPositionWriter(
        _use_case(store),
        executor=executor,
        on_conflict=lambda table_id, exc: conflicts.append((table_id, exc)),
    )
    _use_case(store).execute(TABLE, {"x": 60, "y": 60, "expectedVersion": 1})

    writer.submit(TABLE, _move(20, 20))
    with caplog.at_level(logging.WARNING):
        executor.run_all()

    assert len(conflicts) == 1
    assert conflicts[0][0] == TABLE
    assert conflicts[0][1].details["currentVersion"] == 2
    assert (store.tables[TABLE].x, store.tables[TABLE].y) == (60, 60)
    assert writer.latest(TABLE) is None
    assert any(record.getMessage() == "table_position_conflict" for record in caplog.records)


def test_tables_are_written_independently() -> None:
    store = seeded_memory_store(NOW)
    executor = ManualExecutor()
    writer = CoalescingPositionWriter(_use_case(store), executor=executor)

    writer.submit(TABLE, _move(20, 20))
    writer.submit(TableId("tbl_t4"), _move(50, 50))

    assert len(executor.queue) == 2
    executor.run_all()
    assert store.tables[TABLE].version == 2
    assert store.tables[TableId("tbl_t4")].version == 2


def test_thread_pool_flush_lands_on_last_position() -> None:
    store = seeded_memory_store(NOW)
    writer = CoalescingPositionWriter(_use_case(store))
    try:
        for step in range(20):
            writer.submit(TABLE, _move(10 + step, 20 + step))
        writer.flush(timeout=5)
    finally:
        writer.close()

    table = store.tables[TABLE]
    assert (table.x, table.y) == (29, 39)
    assert 2 <= table.version <= 21


def test_flush_gives_up_after_timeout_when_a_write_never_finishes() -> None:
    store = seeded_memory_store(NOW)
    executor = ManualExecutor()
    writer = CoalescingPositionWriter(_use_case(store), executor=executor)
    writer.submit(TABLE, _move(20, 20))

    with pytest.raises(TimeoutError):
        writer.flush(timeout=0.05)

    executor.run_all()
    writer.flush(timeout=0.05)
    assert store.tables[TABLE].version == 2
