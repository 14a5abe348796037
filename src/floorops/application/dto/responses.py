from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AreaResponse(BaseModel):
    id: str
    name: str
    maxTables: int


class TableResponse(BaseModel):
    id: str
    areaId: str
    capacity: int
    type: str
    name: str
    isVIP: bool
    canMerge: bool
    mergeGroup: str | None = None
    x: float
    y: float
    version: int
    updatedAt: datetime


class ReservationResponse(BaseModel):
    id: str
    tableIds: list[str] = Field(default_factory=list)
    clientName: str
    partySize: int
    date: str
    startTime: str
    endTime: str
    status: str
    duration: int
    notes: str
    createdAt: datetime


class TableWithStatusResponse(TableResponse):
    visualStatus: str
    reservation: ReservationResponse | None = None


class FloorLayoutResponse(BaseModel):
    date: str
    areaId: str | None = None
    areas: list[AreaResponse] = Field(default_factory=list)
    tables: list[TableResponse] = Field(default_factory=list)
    reservations: list[ReservationResponse] = Field(default_factory=list)


class AvailabilitySuggestionResponse(BaseModel):
    tableIds: list[str]
    capacity: int
    tableName: str


class AvailabilityResponse(BaseModel):
    suggestedTables: list[AvailabilitySuggestionResponse] = Field(default_factory=list)
    alternatives: list[AvailabilitySuggestionResponse] = Field(default_factory=list)


class ReleaseTableResponse(BaseModel):
    ok: bool = True
    released: bool
    reservation: ReservationResponse | None = None
