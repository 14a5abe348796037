from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Header, Query, Request, Response, status

from floorops.api.dependencies import clock_of, locks_of, storage_of
from floorops.application.dto.responses import (
    ReleaseTableResponse,
    TableResponse,
    TableWithStatusResponse,
)
from floorops.application.use_cases.create_table import CreateTable
from floorops.application.use_cases.floor_queries import GetTables, GetTableStatuses
from floorops.application.use_cases.release_table import ReleaseTable
from floorops.application.use_cases.update_table_position import UpdateTablePosition
from floorops.domain.common.ids import AreaId, TableId

router = APIRouter()

_ETAG_PATTERN = re.compile(r'^(?:W/)?"table-v(\d+)"$')


def _table_etag(version: int) -> str:
    return f'"table-v{version}"'


def _version_from_if_match(if_match: str | None) -> int | None:
    if not if_match:
        return None
    match = _ETAG_PATTERN.match(if_match.strip())
    if match is None:
        return None
    return int(match.group(1))


def _get_tables_use_case(request: Request) -> GetTables:
    return GetTables(table_repository=storage_of(request).tables)


def _get_table_statuses_use_case(request: Request) -> GetTableStatuses:
    storage = storage_of(request)
    return GetTableStatuses(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
        clock=clock_of(request),
    )


def _create_table_use_case(request: Request) -> CreateTable:
    storage = storage_of(request)
    return CreateTable(
        area_repository=storage.areas,
        table_repository=storage.tables,
        locks=locks_of(request),
        clock=clock_of(request),
    )


def _update_table_position_use_case(request: Request) -> UpdateTablePosition:
    storage = storage_of(request)
    return UpdateTablePosition(
        table_repository=storage.tables,
        area_repository=storage.areas,
        locks=locks_of(request),
        clock=clock_of(request),
    )


def _release_table_use_case(request: Request) -> ReleaseTable:
    storage = storage_of(request)
    return ReleaseTable(
        table_repository=storage.tables,
        reservation_repository=storage.reservations,
        locks=locks_of(request),
        clock=clock_of(request),
    )


@router.get("/v1/tables", response_model=list[TableResponse])
def list_tables(
    request: Request,
    area_id: str | None = Query(default=None, alias="areaId"),
) -> list[TableResponse]:
    return _get_tables_use_case(request).execute(AreaId(area_id) if area_id else None)


@router.post("/v1/tables", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
def create_table(request: Request, payload: dict[str, Any] = Body(...)) -> TableResponse:
    return _create_table_use_case(request).execute(payload)


@router.get("/v1/tables/status", response_model=list[TableWithStatusResponse])
def list_table_statuses(
    request: Request,
    area_id: str | None = Query(default=None, alias="areaId"),
    at: datetime | None = Query(default=None),
) -> list[TableWithStatusResponse]:
    return _get_table_statuses_use_case(request).execute(
        area_id=AreaId(area_id) if area_id else None,
        at=at,
    )


@router.patch("/v1/tables/{table_id}/position", response_model=TableResponse)
def update_table_position(
    table_id: str,
    request: Request,
    response: Response,
    payload: dict[str, Any] = Body(...),
    if_match: str | None = Header(default=None, alias="If-Match"),
) -> TableResponse:
    if "expectedVersion" not in payload and "expected_version" not in payload:
        expected_version = _version_from_if_match(if_match)
        if expected_version is not None:
            payload = {**payload, "expectedVersion": expected_version}

    table = _update_table_position_use_case(request).execute(TableId(table_id), payload)
    response.headers["ETag"] = _table_etag(table.version)
    return table


@router.post("/v1/tables/{table_id}/release", response_model=ReleaseTableResponse)
def release_table(table_id: str, request: Request) -> ReleaseTableResponse:
    return _release_table_use_case(request).execute(TableId(table_id))
