from datetime import date, time, timedelta

import pytest
from pydantic import ValidationError

from checkin.schemas.event import EventData, OneTimeSchedule, RecurringSchedule
from checkin.utils.livenessEvaluator import (
    SessionKey,
    event_status,
    is_live,
    session_key,
    weekday_index,
)

from conftest import SESSION_DAY, VENUE, at

MONDAY, TUESDAY, WEDNESDAY = 1, 2, 3


def make_event(schedule, **overrides):
    values = dict(
        id="evt1",
        host_id="host-1",
        name="Event",
        location=VENUE,
        radius_meters=50,
        schedule=schedule,
        qr_secret="secretX",
    )
    values.update(overrides)
    return EventData(**values)


def one_time(day=SESSION_DAY):
    return make_event(OneTimeSchedule(event_date=day, start_time=time(9, 0), end_time=time(10, 30)))


def recurring(**kwargs):
    return make_event(
        RecurringSchedule(
            days_of_week={MONDAY, WEDNESDAY},
            start_time=time(14, 0),
            end_time=time(15, 0),
            **kwargs,
        )
    )


def test_weekday_index_starts_on_sunday():
    assert weekday_index(at(12, 0, day=date(2026, 3, 1))) == 0
    assert weekday_index(at(12, 0)) == MONDAY
    assert weekday_index(at(12, 0, day=date(2026, 3, 7))) == 6


@pytest.mark.parametrize(
    "now, expected",
    [
        (at(9, 15), True),
        (at(8, 59), False),
        (at(10, 31), False),
        (at(9, 0), True),
        (at(10, 30), True),
    ],
)
def test_one_time_event_window(now, expected):
    assert is_live(one_time(), now) is expected


def test_one_time_window_end_ignores_sub_second_part():
    assert is_live(one_time(), at(10, 30) + timedelta(milliseconds=500))
    assert not is_live(one_time(), at(10, 30, 1))


def test_one_time_event_on_another_day_is_not_live():
    assert not is_live(one_time(day=SESSION_DAY + timedelta(days=1)), at(9, 15))


def test_recurring_event_on_unscheduled_day_is_not_live():
    tuesday = SESSION_DAY + timedelta(days=1)
    assert not is_live(recurring(), at(14, 30, day=tuesday))


def test_recurring_event_on_scheduled_day_is_live():
    assert is_live(recurring(), at(14, 30))
    assert is_live(recurring(), at(14, 30, day=SESSION_DAY + timedelta(days=2)))
    assert not is_live(recurring(), at(15, 1))


def test_recurring_event_stops_after_end_repeat_date():
    event = recurring(end_repeat_date=SESSION_DAY)
    assert is_live(event, at(14, 30))
    assert not is_live(event, at(14, 30, day=SESSION_DAY + timedelta(days=7)))


def test_inactive_event_is_never_live():
    assert not is_live(one_time().model_copy(update={"is_active": False}), at(9, 15))
    assert not is_live(recurring().model_copy(update={"is_active": False}), at(14, 30))


def test_overnight_window_is_rejected():
    with pytest.raises(ValidationError):
        OneTimeSchedule(event_date=SESSION_DAY, start_time=time(22, 0), end_time=time(2, 0))


def test_recurring_schedule_needs_valid_days():
    with pytest.raises(ValidationError):
        RecurringSchedule(days_of_week=set(), start_time=time(9, 0), end_time=time(10, 0))
    with pytest.raises(ValidationError):
        RecurringSchedule(days_of_week={7}, start_time=time(9, 0), end_time=time(10, 0))


def test_session_key_of_one_time_event_is_its_date():
    later = at(9, 15, day=SESSION_DAY + timedelta(days=3))
    assert session_key(one_time(), later) == SessionKey("evt1", SESSION_DAY)


def test_session_key_of_recurring_event_is_the_current_day():
    wednesday = SESSION_DAY + timedelta(days=2)
    assert session_key(recurring(), at(14, 30)) == SessionKey("evt1", SESSION_DAY)
    assert session_key(recurring(), at(14, 30, day=wednesday)) == SessionKey("evt1", wednesday)


@pytest.mark.parametrize(
    "now, expected",
    [
        (at(8, 0), "upcoming"),
        (at(9, 15), "live"),
        (at(11, 0), "completed"),
        (at(9, 15, day=SESSION_DAY + timedelta(days=1)), "completed"),
        (at(9, 15, day=SESSION_DAY - timedelta(days=1)), "upcoming"),
    ],
)
def test_one_time_event_status(now, expected):
    assert event_status(one_time(), now) == expected


def test_recurring_event_status():
    assert event_status(recurring(), at(14, 30)) == "live"
    assert event_status(recurring(), at(16, 0)) == "upcoming"
    ended = recurring(end_repeat_date=SESSION_DAY - timedelta(days=1))
    assert event_status(ended, at(14, 30)) == "completed"


def test_inactive_event_status_is_completed():
    assert event_status(one_time().model_copy(update={"is_active": False}), at(9, 15)) == "completed"
