import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from checkin.api.auth import get_current_host_user, get_current_user
from checkin.config import LOG_LEVEL, QR_REFRESH_SECONDS, TOKEN_FRESHNESS_MS
from checkin.database.initialize import create_tables
from checkin.database.session import get_db
from checkin.database.store import SqlAttendanceStore
from checkin.models import Event
from checkin.schemas.accessToken import TokenData
from checkin.schemas.checkIn import (
    AttendanceHistoryOut,
    AttendanceOut,
    AttendanceSummaryOut,
    CheckInRequest,
    QRCodeOut,
    SessionLogOut,
)
from checkin.schemas.event import (
    Coordinate,
    EventCreate,
    EventStatus,
    EventUpdate,
    OneTimeSchedule,
    RecurringSchedule,
)
from checkin.utils import tokenCodec
from checkin.utils.attendanceAggregator import AttendanceAggregator
from checkin.utils.attendanceRecorder import AttendanceRecorder
from checkin.utils.checkInVerifier import Reason, verify
from checkin.utils.clock import Clock, SystemClock, epoch_millis
from checkin.utils.errors import AlreadyCheckedIn, StorageUnavailable, TokenError
from checkin.utils.livenessEvaluator import event_status, is_live

logging.basicConfig(level=LOG_LEVEL)

# Fields hosts may still edit after attendance has been recorded
METADATA_FIELDS = {"name", "description", "location_name"}

REJECTION_STATUS = {Reason.EVENT_NOT_LIVE: 403}


# ----------------------------------------FastAPI App Init--------------------------------------------
@asynccontextmanager
async def lifespan(_app: FastAPI):
    create_tables()
    yield


app = FastAPI(lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Just for Development. Would be changed later.
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(_request: Request, exc: StorageUnavailable):
    # already logged where the driver error was caught
    return JSONResponse(
        status_code=503,
        content={"detail": {"reason": exc.reason, "message": "Storage unavailable. Please retry."}},
    )


# ----------------------------------------Dependencies--------------------------------------------
def get_clock() -> Clock:
    return SystemClock()


def get_store(db: Session = Depends(get_db)) -> SqlAttendanceStore:
    return SqlAttendanceStore(db)


db_dependency = Annotated[Session, Depends(get_db)]
store_dependency = Annotated[SqlAttendanceStore, Depends(get_store)]
clock_dependency = Annotated[Clock, Depends(get_clock)]
host_dependency = Annotated[TokenData, Depends(get_current_host_user)]
general_user = Annotated[TokenData, Depends(get_current_user)]


# ----------------------------------------Helpers--------------------------------------------
def _get_owned_event(db: Session, event_id: str, user: TokenData) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    if event.host_id != user.user_id:
        raise HTTPException(
            status_code=401,
            detail="No permission to manage this event, as you're not its host",
        )
    return event


def _apply_schedule(event: Event, schedule) -> None:
    event.start_time = schedule.start_time
    event.end_time = schedule.end_time
    if isinstance(schedule, RecurringSchedule):
        event.is_recurring = True
        event.recurring_days = sorted(schedule.days_of_week)
        event.end_repeat_date = schedule.end_repeat_date
        event.event_date = None
    else:
        event.is_recurring = False
        event.recurring_days = None
        event.end_repeat_date = None
        event.event_date = schedule.event_date


def _event_out(event: Event) -> dict:
    return event.to_data().model_dump(mode="json", exclude={"qr_secret"})


# ----------------------------------------Routes--------------------------------------------
@app.get("/")
def index():
    return "Hello! Access our documentation by adding '/docs' to the url above"


# ---------------------------- Endpoint to create an event
@app.post("/events/", status_code=201)
def create_event(event: EventCreate, user: host_dependency, db: db_dependency, clock: clock_dependency):
    """Creates a one-time or recurring event hosted by the requesting user."""
    schedule = event.schedule
    now = clock.now()

    if isinstance(schedule, OneTimeSchedule):
        ends_at = datetime.combine(schedule.event_date, schedule.end_time, tzinfo=now.tzinfo)
        if ends_at < now:
            raise HTTPException(status_code=400, detail="End time cannot be in the past.")

    new_event = Event(
        host_id=user.user_id,
        name=event.name,
        description=event.description,
        location_name=event.location_name,
        latitude=event.latitude,
        longitude=event.longitude,
        radius_meters=event.radius_meters,
        max_attendees=event.max_attendees,
        is_active=True,
        time_created=now.astimezone(timezone.utc).replace(tzinfo=None),
    )
    _apply_schedule(new_event, schedule)

    db.add(new_event)
    db.commit()
    db.refresh(new_event)
    logging.info(f"Host {user.user_id} created event {new_event.id}")
    return _event_out(new_event)


# ---------------------------- Endpoint to edit an event
@app.patch("/events/{event_id}")
def update_event(event_id: str, changes: EventUpdate, user: host_dependency, db: db_dependency, store: store_dependency):
    """Edits an event. Only metadata may change once attendance exists."""
    event = _get_owned_event(db, event_id, user)
    updates = changes.model_dump(exclude_unset=True)

    locked_fields = set(updates) - METADATA_FIELDS
    if locked_fields and store.has_attendance(event_id):
        raise HTTPException(
            status_code=409,
            detail=f"Attendance already recorded; cannot change {', '.join(sorted(locked_fields))}",
        )

    for field in ("description", "location_name", "max_attendees"):
        if field in updates:
            setattr(event, field, updates[field])
    # required columns ignore explicit nulls
    for field in ("name", "latitude", "longitude", "radius_meters"):
        if updates.get(field) is not None:
            setattr(event, field, updates[field])
    if changes.schedule is not None:
        _apply_schedule(event, changes.schedule)

    db.commit()
    db.refresh(event)
    return _event_out(event)


# ---------------------------- Endpoint to manually deactivate an event
@app.put("/events/{event_id}/deactivate", response_model=str)
def deactivate_event(event_id: str, user: host_dependency, db: db_dependency):
    """Manually deactivates the event for the host."""
    event = _get_owned_event(db, event_id, user)
    if not event.is_active:
        raise HTTPException(status_code=400, detail="Event is already inactive")

    event.is_active = False
    db.commit()
    return f"Successfully deactivated event {event.name}"


# ---------------------------- Endpoint to delete an event and its attendance
@app.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str, user: host_dependency, db: db_dependency):
    event = _get_owned_event(db, event_id, user)
    db.delete(event)
    db.commit()
    logging.info(f"Host {user.user_id} deleted event {event_id} and its attendance")


# ---------------------------- Endpoint to get the live status of an event
@app.get("/events/{event_id}/status", response_model=EventStatus)
def get_event_status(event_id: str, _: general_user, store: store_dependency, clock: clock_dependency):
    event = store.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    now = clock.now()
    return EventStatus(event_id=event_id, status=event_status(event, now), is_live=is_live(event, now))


# ---------------------------- Endpoint to get the rotating QR payload for the host display
@app.get("/events/{event_id}/qr", response_model=QRCodeOut)
def get_event_qr(event_id: str, user: host_dependency, db: db_dependency, clock: clock_dependency):
    """Issues a fresh check-in token. Displays refresh every few seconds."""
    event = _get_owned_event(db, event_id, user)
    now = clock.now()
    return QRCodeOut(
        token=tokenCodec.issue(event.id, event.qr_secret, now),
        issued_at_ms=epoch_millis(now),
        expires_in_ms=TOKEN_FRESHNESS_MS,
        refresh_in_seconds=QR_REFRESH_SECONDS,
    )


# ---------------------------- Endpoint to validate a check-in and store it
@app.post("/check_in/", status_code=201, response_model=AttendanceOut)
def check_in(body: CheckInRequest, user: general_user, store: store_dependency, clock: clock_dependency):
    """Verifies a scanned token and the attendee's position, then records attendance."""
    now = clock.now()
    position = Coordinate(latitude=body.latitude, longitude=body.longitude)

    try:
        token = tokenCodec.parse(body.token, now)
    except TokenError as e:
        logging.info(f"Check-in by {user.user_id} rejected: {e.reason}")
        raise HTTPException(status_code=400, detail={"reason": e.reason, "message": str(e)})

    event = store.get_event(token.event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")

    verdict = verify(body.token, position, event, now)
    if verdict.rejected:
        logging.info(
            f"Check-in by {user.user_id} to {event.id} rejected: {verdict.reason.value} "
            f"(accuracy={body.accuracy})"
        )
        detail = {"reason": verdict.reason.value}
        if verdict.distance_meters is not None:
            detail["distance_meters"] = round(verdict.distance_meters, 2)
            detail["radius_meters"] = event.radius_meters
        raise HTTPException(status_code=REJECTION_STATUS.get(verdict.reason, 400), detail=detail)

    try:
        record = AttendanceRecorder(store).record(verdict, user.user_id, now)
    except AlreadyCheckedIn as e:
        raise HTTPException(
            status_code=409,
            detail={"reason": e.reason, "message": "You have already checked in for this session"},
        )

    return record


# ---------------------------- Endpoint to get attendance statistics for an event
@app.get("/events/{event_id}/stats", response_model=AttendanceSummaryOut)
def get_event_stats(
    event_id: str,
    user: host_dependency,
    db: db_dependency,
    store: store_dependency,
    session_date: Optional[date] = None,
):
    """Totals, average, peak and the attendance rate of one session (latest by default)."""
    event = _get_owned_event(db, event_id, user)
    aggregator = AttendanceAggregator(store.list_attendance(event_id))
    return aggregator.summary(event.max_attendees, session_date)


# ---------------------------- Endpoint to list attendance logs per session
@app.get("/events/{event_id}/sessions", response_model=list[SessionLogOut])
def get_event_sessions(event_id: str, user: host_dependency, db: db_dependency, store: store_dependency):
    _get_owned_event(db, event_id, user)
    return AttendanceAggregator(store.list_attendance(event_id)).session_logs()


# ---------------------------- Endpoint to list the user's own attendance
@app.get("/my_attendance/", response_model=AttendanceHistoryOut)
def my_attendance(user: general_user, store: store_dependency):
    """Gets the attendance records of the requesting user, newest first."""
    aggregator = AttendanceAggregator(store.list_user_attendance(user.user_id))
    records = aggregator.user_history(user.user_id)
    return {"records": records, "last_check_in": aggregator.last_check_in(user.user_id)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
