from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from floorops.domain.common.ids import AreaId


class AreaName(str, Enum):
    TERRAZA = "Terraza"
    PATIO = "Patio"
    LOBBY = "Lobby"
    BAR = "Bar"
    VIP = "Salones VIP"


@dataclass(frozen=True)
class Area:
    area_id: AreaId
    name: AreaName
    max_tables: int

    def __post_init__(self) -> None:
        if self.max_tables < 1:
            raise ValueError("max_tables must be >= 1")

    @property
    def is_vip(self) -> bool:
        return self.name == AreaName.VIP

    @property
    def table_prefix(self) -> str:
        if self.is_vip:
            return "V"
        return self.name.value[0]
