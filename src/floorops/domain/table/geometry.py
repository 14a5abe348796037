from __future__ import annotations

from dataclasses import dataclass

from floorops.domain.area.entities import AreaName
from floorops.domain.table.entities import Table, TableType

ROOT_REM_PX = 16


@dataclass(frozen=True)
class ZoneInset:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class Footprint:
    width_rem: float
    height_rem: float


DEFAULT_ZONE_INSET = ZoneInset(top=10, right=8, bottom=12, left=8)

ZONE_INSETS: dict[AreaName, ZoneInset] = {
    AreaName.TERRAZA: ZoneInset(top=7, right=7, bottom=12, left=7),
    AreaName.PATIO: ZoneInset(top=10, right=9, bottom=13, left=9),
    AreaName.LOBBY: ZoneInset(top=11, right=11, bottom=14, left=11),
    AreaName.BAR: ZoneInset(top=12, right=10, bottom=15, left=10),
    AreaName.VIP: ZoneInset(top=9, right=14, bottom=13, left=14),
}

_CIRCULAR = Footprint(width_rem=14, height_rem=14)
_MERGED = Footprint(width_rem=22, height_rem=10)
_DEFAULT = Footprint(width_rem=10, height_rem=8)
_BY_CAPACITY: dict[int, Footprint] = {
    2: Footprint(width_rem=8, height_rem=8),
    4: Footprint(width_rem=12, height_rem=8),
    6: Footprint(width_rem=14, height_rem=10),
    8: Footprint(width_rem=16, height_rem=10),
    10: Footprint(width_rem=14, height_rem=14),
}


def zone_inset_for(area_name: AreaName | None) -> ZoneInset:
    if area_name is None:
        return DEFAULT_ZONE_INSET
    return ZONE_INSETS.get(area_name, DEFAULT_ZONE_INSET)


def footprint_for(table: Table, merged_view: bool = False) -> Footprint:
    # Circular tables keep their size even when rendered as part of a merge.
    if table.type == TableType.CIRCULAR:
        return _CIRCULAR
    if merged_view:
        return _MERGED
    return _BY_CAPACITY.get(table.capacity, _DEFAULT)


def _clamp(value: float, lower: float, upper: float) -> float:
    if upper <= lower:
        return lower
    return max(lower, min(upper, value))


def clamp_position(
    table: Table,
    x: float,
    y: float,
    inset: ZoneInset,
    canvas_width: float | None = None,
    canvas_height: float | None = None,
    merged_view: bool = False,
) -> tuple[float, float]:
    """Clamp a requested (x, y) percentage position into the area's inset zone.

    The table's footprint is converted to canvas percentages so its far edge
    never crosses the right/bottom inset. Without canvas dimensions only the
    inset bounds apply.
    """
    width_pct = 0.0
    height_pct = 0.0
    if canvas_width is not None and canvas_height is not None:
        footprint = footprint_for(table, merged_view)
        width_pct = footprint.width_rem * ROOT_REM_PX / max(1.0, canvas_width) * 100
        height_pct = footprint.height_rem * ROOT_REM_PX / max(1.0, canvas_height) * 100

    clamped_x = _clamp(x, inset.left, 100 - inset.right - width_pct)
    clamped_y = _clamp(y, inset.top, 100 - inset.bottom - height_pct)
    return clamped_x, clamped_y
