import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Text, Time
from sqlalchemy.orm import relationship

from checkin.database.session import Base
from checkin.schemas.event import (
    Coordinate,
    EventData,
    OneTimeSchedule,
    RecurringSchedule,
)


def generate_hex_id():
    # hex only: ids and secrets travel inside hyphen-delimited tokens
    return uuid.uuid4().hex


class Event(Base):
    __tablename__ = "Events"

    id = Column(String(32), primary_key=True, default=generate_hex_id)
    host_id = Column(String(64), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text)
    location_name = Column(String(120))
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_meters = Column(Float, nullable=False, default=50)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_days = Column(JSON)  # 0=Sunday..6=Saturday
    event_date = Column(Date)  # for one-time events
    end_repeat_date = Column(Date)  # for recurring events, None repeats forever
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    max_attendees = Column(Integer)
    qr_secret = Column(String(32), nullable=False, default=generate_hex_id)
    is_active = Column(Boolean, nullable=False, default=True)
    time_created = Column(DateTime)

    attendance_records = relationship(
        "AttendanceRecord",
        back_populates="event",
        cascade="all, delete-orphan",
    )

    def schedule(self):
        if self.is_recurring:
            return RecurringSchedule(
                days_of_week=set(self.recurring_days or []),
                start_time=self.start_time,
                end_time=self.end_time,
                end_repeat_date=self.end_repeat_date,
            )
        return OneTimeSchedule(
            event_date=self.event_date,
            start_time=self.start_time,
            end_time=self.end_time,
        )

    def to_data(self) -> EventData:
        """Snapshot of the row the verifier and liveness checks work on."""
        return EventData(
            id=self.id,
            host_id=self.host_id,
            name=self.name,
            description=self.description,
            location_name=self.location_name,
            location=Coordinate(latitude=self.latitude, longitude=self.longitude),
            radius_meters=self.radius_meters,
            schedule=self.schedule(),
            max_attendees=self.max_attendees,
            is_active=self.is_active,
            qr_secret=self.qr_secret,
        )
