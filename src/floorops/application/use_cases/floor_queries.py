from __future__ import annotations

from datetime import datetime

from floorops.application.clock import Clock
from floorops.application.dto.responses import (
    AreaResponse,
    FloorLayoutResponse,
    ReservationResponse,
    TableResponse,
    TableWithStatusResponse,
)
from floorops.application.mappers.floor_mapper import (
    to_area_response,
    to_reservation_response,
    to_table_response,
    to_table_with_status_response,
)
from floorops.application.ports.repositories import (
    AreaRepository,
    ReservationRepository,
    TableRepository,
)
from floorops.domain.common.errors import InputValidationError
from floorops.domain.common.ids import AreaId
from floorops.domain.reservation.entities import Reservation
from floorops.domain.reservation.time_window import date_of, is_valid_date
from floorops.domain.table.visual_status import compute_visual_status


class GetAreas:
    def __init__(self, area_repository: AreaRepository) -> None:
        self._area_repository = area_repository

    def execute(self) -> list[AreaResponse]:
        return [to_area_response(area) for area in self._area_repository.list()]


class GetTables:
    def __init__(self, table_repository: TableRepository) -> None:
        self._table_repository = table_repository

    def execute(self, area_id: AreaId | None = None) -> list[TableResponse]:
        return [to_table_response(table) for table in self._table_repository.list(area_id)]


class GetReservations:
    def __init__(
        self,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
    ) -> None:
        self._table_repository = table_repository
        self._reservation_repository = reservation_repository

    def execute(self, date: str, area_id: AreaId | None = None) -> list[ReservationResponse]:
        return [to_reservation_response(item) for item in self.load(date, area_id)]

    def load(self, date: str, area_id: AreaId | None = None) -> list[Reservation]:
        if not is_valid_date(date):
            raise InputValidationError(
                "date must be YYYY-MM-DD", details={"field": "date", "value": date}
            )
        reservations = self._reservation_repository.list_for_date(date)
        if area_id is None:
            return reservations
        area_table_ids = {table.table_id for table in self._table_repository.list(area_id)}
        return [item for item in reservations if item.uses_any(list(area_table_ids))]


class GetFloorLayout:
    def __init__(
        self,
        area_repository: AreaRepository,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
        clock: Clock,
    ) -> None:
        self._area_repository = area_repository
        self._table_repository = table_repository
        self._reservations = GetReservations(table_repository, reservation_repository)
        self._clock = clock

    def execute(self, date: str | None = None, area_id: AreaId | None = None) -> FloorLayoutResponse:
        layout_date = date or date_of(self._clock())
        reservations = self._reservations.load(layout_date, area_id)
        return FloorLayoutResponse(
            date=layout_date,
            areaId=str(area_id) if area_id is not None else None,
            areas=[to_area_response(area) for area in self._area_repository.list()],
            tables=[to_table_response(table) for table in self._table_repository.list(area_id)],
            reservations=[to_reservation_response(item) for item in reservations],
        )


class GetTableStatuses:
    def __init__(
        self,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
        clock: Clock,
    ) -> None:
        self._table_repository = table_repository
        self._reservation_repository = reservation_repository
        self._clock = clock

    def execute(
        self,
        area_id: AreaId | None = None,
        at: datetime | None = None,
    ) -> list[TableWithStatusResponse]:
        now = self._clock()
        if at is not None:
            # Naive instants are read as restaurant wall-clock time.
            now = at.astimezone(now.tzinfo) if at.tzinfo is not None else at
        reservations = self._reservation_repository.list_for_date(date_of(now))
        return [
            to_table_with_status_response(compute_visual_status(table, reservations, now))
            for table in self._table_repository.list(area_id)
        ]
