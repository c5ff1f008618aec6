import logging
from enum import Enum
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from checkin.models import AttendanceRecord, Event
from checkin.schemas.event import EventData
from checkin.utils.errors import StorageUnavailable
from checkin.utils.livenessEvaluator import SessionKey


class InsertOutcome(str, Enum):
    INSERTED = "inserted"
    ALREADY_EXISTS = "already_exists"


class AttendanceStore(Protocol):
    def get_event(self, event_id: str) -> EventData | None: ...

    def insert_attendance_if_absent(
        self, key: SessionKey, user_id: str, record: AttendanceRecord
    ) -> tuple[InsertOutcome, AttendanceRecord]: ...

    def list_attendance(self, event_id: str) -> list[AttendanceRecord]: ...


class SqlAttendanceStore:
    """Attendance storage backed by a SQLAlchemy session.

    Duplicate prevention relies on the ``uq_attendance_session`` unique
    constraint, so concurrent handlers (or replicas) can race safely.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_event(self, event_id: str) -> EventData | None:
        try:
            event = self.db.get(Event, event_id)
        except SQLAlchemyError as e:
            logging.error(f"Could not load event {event_id}: {e}")
            raise StorageUnavailable("Event storage is unavailable") from e
        return event.to_data() if event else None

    def _find(self, key: SessionKey, user_id: str):
        return self.db.scalars(
            select(AttendanceRecord).where(
                AttendanceRecord.event_id == key.event_id,
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.session_date == key.session_date,
            )
        ).first()

    def insert_attendance_if_absent(self, key, user_id, record):
        record.event_id = key.event_id
        record.user_id = user_id
        record.session_date = key.session_date
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return InsertOutcome.INSERTED, record
        except IntegrityError as e:
            self.db.rollback()
            # only the session constraint counts as a duplicate
            try:
                existing = self._find(key, user_id)
            except SQLAlchemyError as lookup_error:
                logging.error(f"Duplicate lookup failed after insert conflict: {lookup_error}")
                raise StorageUnavailable("Attendance storage is unavailable") from lookup_error
            if existing is not None:
                return InsertOutcome.ALREADY_EXISTS, existing
            logging.error(f"Attendance insert violated an unexpected constraint: {e}")
            raise StorageUnavailable("Attendance could not be stored") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logging.error(f"Attendance insert failed: {e}")
            raise StorageUnavailable("Attendance storage is unavailable") from e

    def list_attendance(self, event_id: str) -> list[AttendanceRecord]:
        try:
            return list(
                self.db.scalars(
                    select(AttendanceRecord).where(AttendanceRecord.event_id == event_id)
                )
            )
        except SQLAlchemyError as e:
            logging.error(f"Could not list attendance for event {event_id}: {e}")
            raise StorageUnavailable("Attendance storage is unavailable") from e

    def list_user_attendance(self, user_id: str) -> list[AttendanceRecord]:
        try:
            return list(
                self.db.scalars(
                    select(AttendanceRecord).where(AttendanceRecord.user_id == user_id)
                )
            )
        except SQLAlchemyError as e:
            logging.error(f"Could not list attendance for user {user_id}: {e}")
            raise StorageUnavailable("Attendance storage is unavailable") from e

    def has_attendance(self, event_id: str) -> bool:
        try:
            return (
                self.db.scalars(
                    select(AttendanceRecord.id).where(AttendanceRecord.event_id == event_id).limit(1)
                ).first()
                is not None
            )
        except SQLAlchemyError as e:
            logging.error(f"Could not check attendance for event {event_id}: {e}")
            raise StorageUnavailable("Attendance storage is unavailable") from e
