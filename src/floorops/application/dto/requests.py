from __future__ import annotations

from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from floorops.domain.common.errors import InputValidationError
from floorops.domain.reservation.time_window import DAY_END, is_valid_date

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class CreateReservationRequest(CamelBaseModel):
    table_ids: list[str] = Field(min_length=1)
    client_name: str = Field(min_length=1, max_length=120)
    party_size: int = Field(gt=0)
    date: str = Field(pattern=DATE_PATTERN)
    start_time: str = Field(pattern=CLOCK_PATTERN)
    end_time: str = Field(pattern=CLOCK_PATTERN)
    status: Literal["pending", "confirmed"] = "pending"
    duration: int | None = Field(default=None, ge=0)
    notes: str = Field(default="", max_length=500)

    @model_validator(mode="after")
    def _check_window(self) -> CreateReservationRequest:
        if not is_valid_date(self.date):
            raise ValueError("date is not a calendar date")
        if any(not table_id for table_id in self.table_ids):
            raise ValueError("tableIds must not contain empty ids")
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime (same day only)")
        return self


class CreateWalkInRequest(CamelBaseModel):
    table_id: str = Field(min_length=1)
    client_name: str | None = Field(default=None, min_length=1, max_length=120)
    party_size: int | None = Field(default=None, gt=0)
    notes: str | None = Field(default=None, max_length=500)


class UpdateReservationStatusRequest(CamelBaseModel):
    status: Literal["pending", "confirmed", "cancelled", "completed", "no_show"]


class UpdateTablePositionRequest(CamelBaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float = Field(ge=0, le=100)
    y: float = Field(ge=0, le=100)
    expected_version: int | None = Field(default=None, ge=1)
    area_id: str | None = Field(default=None, min_length=1)
    canvas_width: float | None = Field(default=None, gt=0)
    canvas_height: float | None = Field(default=None, gt=0)
    is_merged_view: bool = False


class CreateTableRequest(CamelBaseModel):
    area_id: str = Field(min_length=1)
    capacity: Literal[2, 4, 6, 8] = 4
    type: Literal["standard", "square"] = "standard"


class AvailabilityQuery(CamelBaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    party_size: int = Field(gt=0)
    start_time: str = Field(pattern=CLOCK_PATTERN)
    area_preference: str | None = None

    @model_validator(mode="after")
    def _check_date(self) -> AvailabilityQuery:
        if not is_valid_date(self.date):
            raise ValueError("date is not a calendar date")
        if self.start_time >= DAY_END:
            raise ValueError(f"startTime must be before {DAY_END} (same day only)")
        return self


RequestModel = TypeVar("RequestModel", bound=BaseModel)


def parse_request(model: type[RequestModel], payload: Any) -> RequestModel:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InputValidationError(
            "request validation failed",
            details={
                "errors": exc.errors(include_url=False, include_context=False, include_input=False)
            },
        ) from exc
