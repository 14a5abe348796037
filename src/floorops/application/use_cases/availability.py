from __future__ import annotations

from typing import Any

from floorops.application.dto.requests import AvailabilityQuery, parse_request
from floorops.application.dto.responses import (
    AvailabilityResponse,
    AvailabilitySuggestionResponse,
)
from floorops.application.ports.repositories import ReservationRepository, TableRepository
from floorops.domain.common.ids import AreaId
from floorops.domain.reservation.rules import has_table_overlap
from floorops.domain.reservation.time_window import add_minutes
from floorops.domain.table.entities import Table

DEFAULT_SLOT_MINUTES = 90
SUGGESTED_LIMIT = 3
ALTERNATIVES_LIMIT = 3


class GetAvailability:
    def __init__(
        self,
        table_repository: TableRepository,
        reservation_repository: ReservationRepository,
        slot_minutes: int = DEFAULT_SLOT_MINUTES,
    ) -> None:
        self._table_repository = table_repository
        self._reservation_repository = reservation_repository
        self._slot_minutes = slot_minutes

    def execute(self, payload: Any) -> AvailabilityResponse:
        query = parse_request(AvailabilityQuery, payload)
        end_time = add_minutes(query.start_time, self._slot_minutes)
        area_id = AreaId(query.area_preference) if query.area_preference else None
        reservations = self._reservation_repository.list_for_date(query.date)

        available = sorted(
            (
                table
                for table in self._table_repository.list(area_id)
                if table.capacity >= query.party_size
                and not has_table_overlap(
                    reservations,
                    [table.table_id],
                    query.date,
                    query.start_time,
                    end_time,
                )
            ),
            key=lambda table: table.capacity,
        )

        return AvailabilityResponse(
            suggestedTables=[_suggestion(table) for table in available[:SUGGESTED_LIMIT]],
            alternatives=[
                _suggestion(table)
                for table in available[SUGGESTED_LIMIT : SUGGESTED_LIMIT + ALTERNATIVES_LIMIT]
            ],
        )


def _suggestion(table: Table) -> AvailabilitySuggestionResponse:
    return AvailabilitySuggestionResponse(
        tableIds=[str(table.table_id)],
        capacity=table.capacity,
        tableName=table.name,
    )
