from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from floorops.domain.common.ids import AreaId, TableId


class TableType(str, Enum):
    STANDARD = "standard"
    CIRCULAR = "circular"
    SQUARE = "square"


@dataclass(frozen=True)
class Table:
    table_id: TableId
    area_id: AreaId
    capacity: int
    type: TableType
    name: str
    is_vip: bool
    can_merge: bool
    merge_group: str | None
    x: float
    y: float
    version: int
    updated_at: datetime

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("capacity must be >= 1")
        if self.version < 1:
            raise ValueError("version must be >= 1")
        if not self.name:
            raise ValueError("name must not be empty")

    def move_to(self, x: float, y: float, now: datetime) -> Table:
        return replace(self, x=x, y=y, version=self.version + 1, updated_at=now)

    def merges_with(self, other: Table) -> bool:
        return (
            self.table_id != other.table_id
            and self.can_merge
            and other.can_merge
            and self.merge_group is not None
            and self.merge_group == other.merge_group
        )
