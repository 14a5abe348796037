from __future__ import annotations

from typing import Any

from floorops.application.clock import Clock
from floorops.application.concurrency import KeyedLocks
from floorops.application.dto.requests import UpdateTablePositionRequest, parse_request
from floorops.application.dto.responses import TableResponse
from floorops.application.mappers.floor_mapper import to_table_response
from floorops.application.metrics.floor_activity import record_position_update
from floorops.application.ports.repositories import (
    AreaRepository,
    OptimisticConcurrencyError,
    TableRepository,
)
from floorops.domain.common.errors import ConcurrencyConflictError, TableNotFoundError
from floorops.domain.common.ids import AreaId, TableId
from floorops.domain.table.entities import Table
from floorops.domain.table.geometry import clamp_position, zone_inset_for


class UpdateTablePosition:
    def __init__(
        self,
        table_repository: TableRepository,
        area_repository: AreaRepository,
        locks: KeyedLocks,
        clock: Clock,
    ) -> None:
        self._table_repository = table_repository
        self._area_repository = area_repository
        self._locks = locks
        self._clock = clock

    def execute(self, table_id: TableId, payload: Any) -> TableResponse:
        request_dto = parse_request(UpdateTablePositionRequest, payload)
        with self._locks.hold(f"table:{table_id}"):
            table = self._get_table(table_id)
            expected = request_dto.expected_version
            if expected is not None and expected != table.version:
                record_position_update("conflict")
                raise _conflict(table, expected)

            area = self._area_repository.get(AreaId(request_dto.area_id or table.area_id))
            x, y = clamp_position(
                table,
                request_dto.x,
                request_dto.y,
                inset=zone_inset_for(area.name if area is not None else None),
                canvas_width=request_dto.canvas_width,
                canvas_height=request_dto.canvas_height,
                merged_view=request_dto.is_merged_view,
            )

            try:
                persisted = self._table_repository.update_position(
                    table_id=table_id,
                    x=x,
                    y=y,
                    expected_version=table.version,
                    updated_at=self._clock(),
                )
            except OptimisticConcurrencyError as exc:
                record_position_update("conflict")
                current = self._get_table(table_id)
                raise _conflict(current, expected or table.version) from exc

        record_position_update("applied")
        return to_table_response(persisted)

    def _get_table(self, table_id: TableId) -> Table:
        table = self._table_repository.get(table_id)
        if table is None:
            raise TableNotFoundError(
                f"table {table_id} not found", details={"tableId": str(table_id)}
            )
        return table


def _conflict(current: Table, expected_version: int) -> ConcurrencyConflictError:
    return ConcurrencyConflictError(
        f"table {current.table_id} was modified concurrently",
        details={
            "tableId": str(current.table_id),
            "expectedVersion": expected_version,
            "currentVersion": current.version,
            "updatedAt": current.updated_at.isoformat(),
        },
    )
