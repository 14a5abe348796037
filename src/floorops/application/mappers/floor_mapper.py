from __future__ import annotations

from floorops.application.dto.responses import (
    AreaResponse,
    ReservationResponse,
    TableResponse,
    TableWithStatusResponse,
)
from floorops.domain.area.entities import Area
from floorops.domain.reservation.entities import Reservation
from floorops.domain.table.entities import Table
from floorops.domain.table.visual_status import TableStatusView


def to_area_response(area: Area) -> AreaResponse:
    return AreaResponse(id=str(area.area_id), name=area.name.value, maxTables=area.max_tables)


def to_table_response(table: Table) -> TableResponse:
    return TableResponse(
        id=str(table.table_id),
        areaId=str(table.area_id),
        capacity=table.capacity,
        type=table.type.value,
        name=table.name,
        isVIP=table.is_vip,
        canMerge=table.can_merge,
        mergeGroup=table.merge_group,
        x=table.x,
        y=table.y,
        version=table.version,
        updatedAt=table.updated_at,
    )


def to_reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        id=str(reservation.reservation_id),
        tableIds=[str(table_id) for table_id in reservation.table_ids],
        clientName=reservation.client_name,
        partySize=reservation.party_size,
        date=reservation.date,
        startTime=reservation.start_time,
        endTime=reservation.end_time,
        status=reservation.status.value,
        duration=reservation.duration,
        notes=reservation.notes,
        createdAt=reservation.created_at,
    )


def to_table_with_status_response(view: TableStatusView) -> TableWithStatusResponse:
    base = to_table_response(view.table)
    return TableWithStatusResponse(
        **base.model_dump(),
        visualStatus=view.status.value,
        reservation=(
            to_reservation_response(view.reservation) if view.reservation is not None else None
        ),
    )
