from __future__ import annotations

import re
from typing import Any
from uuid import uuid4

from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import CreateTableRequest, parse_request
from floorops.application.dto.responses import TableResponse
from floorops.application.mappers.floor_mapper import to_table_response
from floorops.application.metrics.floor_activity import record_table_created
from floorops.application.ports.repositories import AreaRepository, TableRepository
from floorops.domain.area.entities import Area
from floorops.domain.common.errors import AreaNotFoundError, AreaTableLimitError
from floorops.domain.common.ids import AreaId, TableId
from floorops.domain.table.entities import Table, TableType
from floorops.domain.table.geometry import zone_inset_for


class CreateTable:
    def __init__(
        self,
        area_repository: AreaRepository,
        table_repository: TableRepository,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._area_repository = area_repository
        self._table_repository = table_repository
        self._locks = locks
        self._clock = clock

    def execute(self, payload: Any) -> TableResponse:
        request_dto = parse_request(CreateTableRequest, payload)
        area_id = AreaId(request_dto.area_id)
        area = self._area_repository.get(area_id)
        if area is None:
            raise AreaNotFoundError(f"area {area_id} not found", details={"areaId": str(area_id)})

        with self._locks.hold(f"area:{area_id}"):
            if self._table_repository.count_for_area(area_id) >= area.max_tables:
                raise AreaTableLimitError(
                    f"area {area_id} already holds {area.max_tables} tables",
                    details={"areaId": str(area_id), "maxTables": area.max_tables},
                )

            inset = zone_inset_for(area.name)
            table = Table(
                table_id=TableId(f"tbl_{uuid4().hex[:12]}"),
                area_id=area_id,
                capacity=request_dto.capacity,
                type=TableType(request_dto.type),
                name=_next_table_name(area, self._table_repository.list(area_id)),
                is_vip=area.is_vip,
                can_merge=False,
                merge_group=None,
                x=inset.left,
                y=inset.top,
                version=1,
                updated_at=self._clock(),
            )
            self._table_repository.add(table)

        record_table_created(area_id=str(area_id))
        return to_table_response(table)


def _next_table_name(area: Area, existing: list[Table]) -> str:
    prefix = area.table_prefix
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    numbers: list[int] = []
    for table in existing:
        match = pattern.match(table.name)
        if match is not None:
            numbers.append(int(match.group(1)))
    return f"{prefix}{max(numbers, default=len(existing)) + 1}"
