from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from floorops.domain.common.errors import CapacityExceededError, VipUnitLimitExceededError
from floorops.domain.common.ids import ReservationId, TableId
from floorops.domain.reservation.entities import Reservation
from floorops.domain.reservation.time_window import overlaps
from floorops.domain.table.entities import Table


@dataclass(frozen=True)
class ReservationRules:
    vip_unit_cap: int = 2
    merge_group_capacity: Mapping[str, int] = field(default_factory=lambda: {"VIP_AB": 6})

    def __post_init__(self) -> None:
        if self.vip_unit_cap < 1:
            raise ValueError("vip_unit_cap must be >= 1")


def has_table_overlap(
    reservations: Iterable[Reservation],
    table_ids: Sequence[TableId],
    date: str,
    start_time: str,
    end_time: str,
    exclude_id: ReservationId | None = None,
) -> bool:
    return find_table_conflict(
        reservations, table_ids, date, start_time, end_time, exclude_id
    ) is not None


def find_table_conflict(
    reservations: Iterable[Reservation],
    table_ids: Sequence[TableId],
    date: str,
    start_time: str,
    end_time: str,
    exclude_id: ReservationId | None = None,
) -> Reservation | None:
    for reservation in reservations:
        if reservation.reservation_id == exclude_id:
            continue
        if reservation.date != date or not reservation.is_active:
            continue
        if not reservation.uses_any(table_ids):
            continue
        if overlaps(reservation.start_time, reservation.end_time, start_time, end_time):
            return reservation
    return None


def vip_unit_key(table_ids: Iterable[TableId], tables_by_id: Mapping[TableId, Table]) -> str | None:
    """Sorted, comma-joined VIP table ids, or None when no VIP table is referenced."""
    vip_ids = sorted(
        str(table_id)
        for table_id in set(table_ids)
        if table_id in tables_by_id and tables_by_id[table_id].is_vip
    )
    if not vip_ids:
        return None
    return ",".join(vip_ids)


def list_vip_unit_keys(
    reservations: Iterable[Reservation],
    tables_by_id: Mapping[TableId, Table],
    date: str,
    start_time: str,
    end_time: str,
    exclude_id: ReservationId | None = None,
) -> set[str]:
    keys: set[str] = set()
    for reservation in reservations:
        if reservation.reservation_id == exclude_id:
            continue
        if reservation.date != date or not reservation.is_active:
            continue
        if not overlaps(reservation.start_time, reservation.end_time, start_time, end_time):
            continue
        key = vip_unit_key(reservation.table_ids, tables_by_id)
        if key is not None:
            keys.add(key)
    return keys


def merge_pair_capacity(
    pair: Sequence[Table],
    rules: ReservationRules,
) -> int | None:
    """Combined capacity when ``pair`` is two tables of one merge group, else None."""
    if len(pair) != 2 or not pair[0].merges_with(pair[1]):
        return None
    group = pair[0].merge_group or ""
    configured = rules.merge_group_capacity.get(group)
    if configured is not None:
        return configured
    return pair[0].capacity + pair[1].capacity


def check_vip_rules(
    reservations: Iterable[Reservation],
    tables_by_id: Mapping[TableId, Table],
    table_ids: Sequence[TableId],
    party_size: int,
    date: str,
    start_time: str,
    end_time: str,
    rules: ReservationRules,
    exclude_id: ReservationId | None = None,
) -> None:
    candidate_key = vip_unit_key(table_ids, tables_by_id)
    if candidate_key is None:
        return

    unit_keys = list_vip_unit_keys(
        reservations, tables_by_id, date, start_time, end_time, exclude_id
    )
    unit_keys.add(candidate_key)
    if len(unit_keys) > rules.vip_unit_cap:
        raise VipUnitLimitExceededError(
            f"at most {rules.vip_unit_cap} simultaneous VIP units are allowed",
            details={"unitKeys": sorted(unit_keys), "cap": rules.vip_unit_cap},
        )

    vip_tables = [tables_by_id[TableId(table_id)] for table_id in candidate_key.split(",")]
    capacity = merge_pair_capacity(vip_tables, rules)
    if capacity is not None and party_size > capacity:
        raise CapacityExceededError(
            f"party of {party_size} exceeds merged VIP capacity {capacity}",
            details={"partySize": party_size, "capacity": capacity, "unitKey": candidate_key},
        )
