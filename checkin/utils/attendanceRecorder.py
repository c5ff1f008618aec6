import logging
from datetime import datetime

from checkin.database.store import InsertOutcome
from checkin.models import AttendanceRecord
from checkin.utils.checkInVerifier import Verdict
from checkin.utils.clock import epoch_millis
from checkin.utils.errors import AlreadyCheckedIn
from checkin.utils.livenessEvaluator import session_key


class AttendanceRecorder:
    """The only code path that creates attendance records.

    One record per (event, user, session). The store's atomic insert is the
    serialization point; this class never looks up before inserting and
    never retries a failed write.
    """

    def __init__(self, store):
        self.store = store

    def record(self, verdict: Verdict, user_id: str, now: datetime) -> AttendanceRecord:
        if not verdict.accepted:
            raise ValueError(f"Cannot record a rejected verdict ({verdict.reason})")

        key = session_key(verdict.event, now)
        new_record = AttendanceRecord(
            checked_in_at_ms=epoch_millis(now),
            latitude=verdict.position.latitude,
            longitude=verdict.position.longitude,
            distance_meters=verdict.distance_meters,
            qr_code_used=verdict.token_raw,
        )

        # StorageUnavailable propagates to the caller untouched
        outcome, stored = self.store.insert_attendance_if_absent(key, user_id, new_record)
        if outcome == InsertOutcome.ALREADY_EXISTS:
            logging.info(f"User {user_id} already checked in to {key.event_id} on {key.session_date}")
            raise AlreadyCheckedIn(f"Already checked in for session {key.session_date}")

        logging.info(
            f"Recorded attendance for user {user_id} at {key.event_id} "
            f"({verdict.distance_meters:.1f}m from venue)"
        )
        return stored
