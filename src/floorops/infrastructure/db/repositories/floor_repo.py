from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, func, select, update
from sqlalchemy.orm import Session

from floorops.application.ports.repositories import (
    AreaRepository,
    OptimisticConcurrencyError,
    TableRepository,
)
from floorops.domain.area.entities import Area, AreaName
from floorops.domain.common.ids import AreaId, TableId
from floorops.domain.table.entities import Table, TableType
from floorops.infrastructure.db.models.floor import AreaModel, FloorTableModel
from floorops.infrastructure.db.session import get_engine

_AREA_ORDER = {name: index for index, name in enumerate(AreaName)}


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqlAlchemyAreaRepository(AreaRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list(self) -> list[Area]:
        with Session(self._engine) as session:
            models = list(session.execute(select(AreaModel)).scalars().all())
        areas = [self._to_domain(model) for model in models]
        return sorted(areas, key=lambda area: (_AREA_ORDER[area.name], area.area_id))

    def get(self, area_id: AreaId) -> Area | None:
        with Session(self._engine) as session:
            model = session.get(AreaModel, str(area_id))
        if model is None:
            return None
        return self._to_domain(model)

    def _to_domain(self, model: AreaModel) -> Area:
        return Area(
            area_id=AreaId(model.id),
            name=AreaName(model.name),
            max_tables=model.max_tables,
        )


class SqlAlchemyTableRepository(TableRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list(self, area_id: AreaId | None = None) -> list[Table]:
        statement = select(FloorTableModel)
        if area_id is not None:
            statement = statement.where(FloorTableModel.area_id == str(area_id))
        statement = statement.order_by(FloorTableModel.id)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._to_domain(model) for model in models]

    def get(self, table_id: TableId) -> Table | None:
        with Session(self._engine) as session:
            model = session.get(FloorTableModel, str(table_id))
        if model is None:
            return None
        return self._to_domain(model)

    def add(self, table: Table) -> None:
        with Session(self._engine) as session:
            session.add(self._to_model(table))
            session.commit()

    def count_for_area(self, area_id: AreaId) -> int:
        statement = select(func.count(FloorTableModel.id)).where(
            FloorTableModel.area_id == str(area_id)
        )
        with Session(self._engine) as session:
            return int(session.execute(statement).scalar_one())

    def update_position(
        self,
        table_id: TableId,
        x: float,
        y: float,
        expected_version: int,
        updated_at: datetime,
    ) -> Table:
        statement = (
            update(FloorTableModel)
            .where(
                FloorTableModel.id == str(table_id),
                FloorTableModel.version == expected_version,
            )
            .values(
                x=x,
                y=y,
                version=FloorTableModel.version + 1,
                updated_at=as_utc(updated_at),
            )
        )
        with Session(self._engine) as session:
            result = session.execute(statement)
            if result.rowcount != 1:
                session.rollback()
                raise OptimisticConcurrencyError(f"table {table_id} version conflict")
            session.commit()

        moved = self.get(table_id)
        if moved is None:
            raise RuntimeError(f"table {table_id} not found after position update")
        return moved

    def _to_model(self, table: Table) -> FloorTableModel:
        return FloorTableModel(
            id=str(table.table_id),
            area_id=str(table.area_id),
            capacity=table.capacity,
            type=table.type.value,
            name=table.name,
            is_vip=table.is_vip,
            can_merge=table.can_merge,
            merge_group=table.merge_group,
            x=table.x,
            y=table.y,
            version=table.version,
            updated_at=as_utc(table.updated_at),
        )

    def _to_domain(self, model: FloorTableModel) -> Table:
        return Table(
            table_id=TableId(model.id),
            area_id=AreaId(model.area_id),
            capacity=model.capacity,
            type=TableType(model.type),
            name=model.name,
            is_vip=model.is_vip,
            can_merge=model.can_merge,
            merge_group=model.merge_group,
            x=model.x,
            y=model.y,
            version=model.version,
            updated_at=as_utc(model.updated_at),
        )
