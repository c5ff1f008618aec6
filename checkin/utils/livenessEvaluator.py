from datetime import date, datetime
from typing import NamedTuple

from checkin.schemas.event import EventData, OneTimeSchedule, RecurringSchedule


class SessionKey(NamedTuple):
    event_id: str
    session_date: date


def weekday_index(instant: datetime) -> int:
    """0=Sunday..6=Saturday."""
    return (instant.weekday() + 1) % 7


def _time_of_day(instant: datetime):
    # compared at second resolution
    return instant.time().replace(microsecond=0)


def _within_window(schedule, instant: datetime) -> bool:
    return schedule.start_time <= _time_of_day(instant) <= schedule.end_time


def is_live(event: EventData, now: datetime) -> bool:
    if not event.is_active:
        return False

    schedule = event.schedule
    if isinstance(schedule, OneTimeSchedule):
        return now.date() == schedule.event_date and _within_window(schedule, now)

    if schedule.end_repeat_date is not None and now.date() > schedule.end_repeat_date:
        return False
    return weekday_index(now) in schedule.days_of_week and _within_window(schedule, now)


def session_key(event: EventData, now: datetime) -> SessionKey:
    if isinstance(event.schedule, RecurringSchedule):
        return SessionKey(event.id, now.date())
    return SessionKey(event.id, event.schedule.event_date)


def event_status(event: EventData, now: datetime) -> str:
    """Dashboard status of an event: live, upcoming or completed."""
    if not event.is_active:
        return "completed"
    if is_live(event, now):
        return "live"

    schedule = event.schedule
    today = now.date()
    if isinstance(schedule, RecurringSchedule):
        if schedule.end_repeat_date is not None and today > schedule.end_repeat_date:
            return "completed"
        return "upcoming"

    if schedule.event_date < today:
        return "completed"
    if schedule.event_date == today and _time_of_day(now) > schedule.end_time:
        return "completed"
    return "upcoming"
