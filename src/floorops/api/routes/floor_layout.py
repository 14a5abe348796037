from __future__ import annotations

from fastapi import APIRouter, Query, Request

from floorops.api.dependencies import clock_of, storage_of
from floorops.application.dto.responses import FloorLayoutResponse
from floorops.application.use_cases.floor_queries import GetFloorLayout
from floorops.domain.common.ids import AreaId

router = APIRouter()


def _get_floor_layout_use_case(request: Request) -> GetFloorLayout:
    storage = storage_of(request)
    return GetFloorLayout(
        area_repository=storage.areas,
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
        clock=clock_of(request),
    )


@router.get("/v1/floor-layout", response_model=FloorLayoutResponse)
def get_floor_layout(
    request: Request,
    date: str | None = Query(default=None),
    area_id: str | None = Query(default=None, alias="areaId"),
) -> FloorLayoutResponse:
    return _get_floor_layout_use_case(request).execute(
        date=date,
        area_id=AreaId(area_id) if area_id else None,
    )
