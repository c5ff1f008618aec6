import math
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import checkin.main as main
from checkin.database.initialize import create_tables
from checkin.database.session import build_engine, get_db
from checkin.models import Event
from checkin.schemas.event import Coordinate
from checkin.utils.clock import FixedClock
from checkin.utils.createAccessToken import create_access_token
from checkin.utils.geoDistance import EARTH_RADIUS_M

UTC = ZoneInfo("UTC")

# Monday
SESSION_DAY = date(2026, 3, 2)
VENUE = Coordinate(latitude=13.736, longitude=100.523)


def at(hour, minute, second=0, day=SESSION_DAY):
    return datetime.combine(day, time(hour, minute, second), tzinfo=UTC)


def north_of(origin: Coordinate, meters: float) -> Coordinate:
    """A point `meters` due north of `origin` along the meridian."""
    return Coordinate(
        latitude=origin.latitude + math.degrees(meters / EARTH_RADIUS_M),
        longitude=origin.longitude,
    )


def add_event(db, **overrides) -> Event:
    values = dict(
        id="evt1",
        host_id="host-1",
        name="Weekly Standup",
        latitude=VENUE.latitude,
        longitude=VENUE.longitude,
        radius_meters=50,
        is_recurring=False,
        event_date=SESSION_DAY,
        start_time=time(9, 0),
        end_time=time(10, 30),
        max_attendees=50,
        qr_secret="secretX",
        is_active=True,
    )
    values.update(overrides)
    event = Event(**values)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture()
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'checkin_test.db'}")
    create_tables(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock():
    return FixedClock(at(9, 15))


@pytest.fixture()
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    main.app.dependency_overrides[main.get_clock] = lambda: clock
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture()
def host_headers():
    return {"Authorization": f"Bearer {create_access_token('host-1', 'host')}"}


@pytest.fixture()
def attendee_headers():
    return {"Authorization": f"Bearer {create_access_token('user-1', 'attendee')}"}
