import datetime as dt

from pydantic import BaseModel, Field


class CheckInRequest(BaseModel):
    token: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    accuracy: float | None = Field(default=None, ge=0)  # meters, as reported by the device


class AttendanceOut(BaseModel):
    id: int
    event_id: str
    user_id: str
    session_date: dt.date
    checked_in_at_ms: int
    latitude: float
    longitude: float
    distance_meters: float

    class Config:
        from_attributes = True


class QRCodeOut(BaseModel):
    token: str
    issued_at_ms: int
    expires_in_ms: int
    refresh_in_seconds: int


class SessionLogOut(BaseModel):
    session_date: dt.date
    attendees: int
    check_ins: list[AttendanceOut]


class AttendanceSummaryOut(BaseModel):
    total_sessions: int
    total_check_ins: int
    average_attendance: int
    peak_attendance: int
    session_date: dt.date | None = None
    session_attendees: int = 0
    attendance_rate: int = 0


class AttendanceHistoryOut(BaseModel):
    records: list[AttendanceOut]
    last_check_in: AttendanceOut | None = None
