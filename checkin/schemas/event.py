import datetime as dt
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class Coordinate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    class Config:
        frozen = True


class _Window(BaseModel):
    start_time: dt.time
    end_time: dt.time

    @model_validator(mode="after")
    def check_window(self):
        # same-day windows only, overnight spans must be split upstream
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class OneTimeSchedule(_Window):
    kind: Literal["one_time"] = "one_time"
    event_date: dt.date


class RecurringSchedule(_Window):
    kind: Literal["recurring"] = "recurring"
    # 0=Sunday..6=Saturday
    days_of_week: set[Annotated[int, Field(ge=0, le=6)]] = Field(min_length=1)
    end_repeat_date: Optional[dt.date] = None


Schedule = Annotated[Union[OneTimeSchedule, RecurringSchedule], Field(discriminator="kind")]


class EventData(BaseModel):
    id: str
    host_id: str
    name: str
    description: str | None = None
    location_name: str | None = None
    location: Coordinate
    radius_meters: float = Field(gt=0)
    schedule: Schedule
    max_attendees: int | None = Field(default=None, gt=0)
    is_active: bool = True
    qr_secret: str


class EventCreate(BaseModel):
    name: str
    description: str | None = None
    location_name: str | None = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    radius_meters: float = Field(default=50, gt=0)
    schedule: Schedule
    max_attendees: int | None = Field(default=50, gt=0)

    class Config:
        from_attributes = True


class EventUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    location_name: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius_meters: float | None = Field(default=None, gt=0)
    schedule: Optional[Schedule] = None
    max_attendees: int | None = Field(default=None, gt=0)


class EventStatus(BaseModel):
    event_id: str
    status: Literal["live", "upcoming", "completed"]
    is_live: bool
