from __future__ import annotations

from fastapi import APIRouter, Request

from floorops.api.dependencies import storage_of
from floorops.application.dto.responses import AreaResponse
from floorops.application.use_cases.floor_queries import GetAreas

router = APIRouter()


def _get_areas_use_case(request: Request) -> GetAreas:
    return GetAreas(area_repository=storage_of(request).areas)


@router.get("/v1/areas", response_model=list[AreaResponse])
def list_areas(request: Request) -> list[AreaResponse]:
    return _get_areas_use_case(request).execute()
