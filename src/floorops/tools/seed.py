from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Engine, inspect
from sqlalchemy.orm import Session

from floorops.domain.area.entities import Area, AreaName
from floorops.domain.common.ids import AreaId, TableId
from floorops.domain.table.entities import Table, TableType
from floorops.infrastructure.db.models.floor import AreaModel, FloorTableModel
from floorops.infrastructure.db.session import get_engine
from floorops.infrastructure.memory.store import InMemoryFloorStore

_AREAS = [
    ("area_terraza", AreaName.TERRAZA, 8),
    ("area_patio", AreaName.PATIO, 8),
    ("area_lobby", AreaName.LOBBY, 8),
    ("area_bar", AreaName.BAR, 8),
    ("area_vip", AreaName.VIP, 3),
]

# (id, area, capacity, type, name, merge group, x, y)
_TABLES = [
    ("tbl_t1", "area_terraza", 2, TableType.STANDARD, "T1", None, 8, 12),
    ("tbl_t2", "area_terraza", 2, TableType.STANDARD, "T2", None, 28, 12),
    ("tbl_t3", "area_terraza", 4, TableType.STANDARD, "T3", None, 50, 12),
    ("tbl_t4", "area_terraza", 4, TableType.STANDARD, "T4", None, 75, 12),
    ("tbl_t5", "area_terraza", 4, TableType.STANDARD, "T5", None, 8, 48),
    ("tbl_t6", "area_terraza", 6, TableType.STANDARD, "T6", None, 32, 48),
    ("tbl_t7", "area_terraza", 6, TableType.STANDARD, "T7", None, 60, 48),
    ("tbl_t8", "area_terraza", 8, TableType.STANDARD, "T8", None, 40, 80),
    ("tbl_p1", "area_patio", 2, TableType.STANDARD, "P1", None, 10, 15),
    ("tbl_p2", "area_patio", 2, TableType.STANDARD, "P2", None, 35, 15),
    ("tbl_p3", "area_patio", 4, TableType.STANDARD, "P3", None, 60, 15),
    ("tbl_p4", "area_patio", 4, TableType.STANDARD, "P4", None, 82, 15),
    ("tbl_p5", "area_patio", 6, TableType.STANDARD, "P5", None, 18, 55),
    ("tbl_p6", "area_patio", 6, TableType.STANDARD, "P6", None, 52, 55),
    ("tbl_p7", "area_patio", 8, TableType.STANDARD, "P7", None, 40, 82),
    ("tbl_l1", "area_lobby", 2, TableType.STANDARD, "L1", None, 12, 18),
    ("tbl_l2", "area_lobby", 2, TableType.STANDARD, "L2", None, 45, 18),
    ("tbl_l3", "area_lobby", 4, TableType.STANDARD, "L3", None, 78, 18),
    ("tbl_l4", "area_lobby", 4, TableType.STANDARD, "L4", None, 12, 58),
    ("tbl_l5", "area_lobby", 6, TableType.STANDARD, "L5", None, 45, 58),
    ("tbl_l6", "area_lobby", 6, TableType.STANDARD, "L6", None, 78, 58),
    ("tbl_b1", "area_bar", 2, TableType.STANDARD, "B1", None, 10, 25),
    ("tbl_b2", "area_bar", 2, TableType.STANDARD, "B2", None, 35, 25),
    ("tbl_b3", "area_bar", 4, TableType.STANDARD, "B3", None, 60, 25),
    ("tbl_b4", "area_bar", 4, TableType.STANDARD, "B4", None, 22, 65),
    ("tbl_b5", "area_bar", 4, TableType.STANDARD, "B5", None, 55, 65),
    ("tbl_v1", "area_vip", 10, TableType.CIRCULAR, "Redonda VIP", None, 40, 15),
    ("tbl_va", "area_vip", 4, TableType.SQUARE, "Cuadrada A", "VIP_AB", 22, 62),
    ("tbl_vb", "area_vip", 4, TableType.SQUARE, "Cuadrada B", "VIP_AB", 58, 62),
]


def reference_areas() -> list[Area]:
    return [
        Area(area_id=AreaId(area_id), name=name, max_tables=max_tables)
        for area_id, name, max_tables in _AREAS
    ]


def reference_tables(now: datetime) -> list[Table]:
    vip_area = "area_vip"
    return [
        Table(
            table_id=TableId(table_id),
            area_id=AreaId(area_id),
            capacity=capacity,
            type=table_type,
            name=name,
            is_vip=area_id == vip_area,
            can_merge=merge_group is not None,
            merge_group=merge_group,
            x=x,
            y=y,
            version=1,
            updated_at=now,
        )
        for table_id, area_id, capacity, table_type, name, merge_group, x, y in _TABLES
    ]


def seeded_memory_store(now: datetime | None = None) -> InMemoryFloorStore:
    seeded_at = now or datetime.now(timezone.utc)
    store = InMemoryFloorStore()
    for area in reference_areas():
        store.areas[area.area_id] = area
    for table in reference_tables(seeded_at):
        store.tables[table.table_id] = table
    return store


def seed_database(engine: Engine, now: datetime | None = None) -> None:
    seeded_at = now or datetime.now(timezone.utc)
    with Session(engine) as session:
        for area in reference_areas():
            session.merge(
                AreaModel(id=str(area.area_id), name=area.name.value, max_tables=area.max_tables)
            )
        for table in reference_tables(seeded_at):
            # Keep positions and versions of tables that were already moved.
            if session.get(FloorTableModel, str(table.table_id)) is not None:
                continue
            session.add(
                FloorTableModel(
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
                    updated_at=table.updated_at,
                )
            )
        session.commit()


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    if not {"areas", "floor_tables"}.issubset(set(inspect(engine).get_table_names())):
        print("no schema yet")
        return

    seed_database(engine)
    print("seed complete")


if __name__ == "__main__":
    main()
