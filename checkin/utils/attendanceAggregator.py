"""Read-side attendance statistics for one event.

Every method is a pure function of the record snapshot passed in. Records
only need ``user_id``, ``session_date`` and ``checked_in_at_ms``.
"""
import math
from collections import defaultdict


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AttendanceAggregator:
    def __init__(self, records):
        self.records = list(records)
        self._sessions = defaultdict(list)
        for record in self.records:
            self._sessions[record.session_date].append(record)

    def sessions(self):
        return sorted(self._sessions)

    def total_attendees(self, session_date) -> int:
        return len({r.user_id for r in self._sessions.get(session_date, [])})

    def attendance_rate(self, session_date, max_attendees: int | None) -> int:
        if not max_attendees:
            return 0
        return round_half_up(self.total_attendees(session_date) / max_attendees * 100)

    def peak_attendance(self) -> int:
        return max((self.total_attendees(d) for d in self._sessions), default=0)

    def average_attendance(self) -> int:
        if not self._sessions:
            return 0
        totals = [self.total_attendees(d) for d in self._sessions]
        return round_half_up(sum(totals) / len(totals))

    def user_history(self, user_id: str):
        return sorted(
            (r for r in self.records if r.user_id == user_id),
            key=lambda r: r.checked_in_at_ms,
            reverse=True,
        )

    def last_check_in(self, user_id: str):
        history = self.user_history(user_id)
        return history[0] if history else None

    def session_logs(self):
        """Sessions newest first, each listing check-ins in arrival order."""
        return [
            {
                "session_date": session_date,
                "attendees": self.total_attendees(session_date),
                "check_ins": sorted(self._sessions[session_date], key=lambda r: r.checked_in_at_ms),
            }
            for session_date in sorted(self._sessions, reverse=True)
        ]

    def summary(self, max_attendees: int | None = None, session_date=None) -> dict:
        if session_date is None and self._sessions:
            session_date = max(self._sessions)
        return {
            "total_sessions": len(self._sessions),
            "total_check_ins": len(self.records),
            "average_attendance": self.average_attendance(),
            "peak_attendance": self.peak_attendance(),
            "session_date": session_date,
            "session_attendees": self.total_attendees(session_date) if session_date else 0,
            "attendance_rate": self.attendance_rate(session_date, max_attendees) if session_date else 0,
        }
