from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from floorops.api.main import create_app
from floorops.domain.reservation.rules import ReservationRules
from floorops.infrastructure.db.models.floor import Base
from floorops.infrastructure.storage import memory_storage
from floorops.tools.seed import seeded_memory_store

FLOOR_NOW = datetime(2026, 3, 10, 13, 20, tzinfo=timezone.utc)


class MutableClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(FLOOR_NOW)


@pytest.fixture
def client(clock: MutableClock) -> Iterator[TestClient]:
    seeded_at = datetime(2026, 3, 10, 8, 0, tzinfo=timezone.utc)
    app = create_app(
        storage=memory_storage(seeded_memory_store(seeded_at)),
        clock=clock,
        rules=ReservationRules(vip_unit_cap=2),
    )
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()
