from __future__ import annotations

from fastapi import APIRouter, Query, Request

from floorops.api.dependencies import storage_of
from floorops.application.dto.responses import AvailabilityResponse
from floorops.application.use_cases.availability import GetAvailability

router = APIRouter()


def _get_availability_use_case(request: Request) -> GetAvailability:
    storage = storage_of(request)
    return GetAvailability(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
    )


@router.get("/v1/availability", response_model=AvailabilityResponse)
def get_availability(
    request: Request,
    date: str = Query(...),
    party_size: int = Query(..., alias="partySize"),
    start_time: str = Query(..., alias="startTime"),
    area_preference: str | None = Query(default=None, alias="areaPreference"),
) -> AvailabilityResponse:
    return _get_availability_use_case(request).execute(
        {
            "date": date,
            "partySize": party_size,
            "startTime": start_time,
            "areaPreference": area_preference,
        }
    )
