from checkin.models.attendanceRecord import AttendanceRecord
from checkin.models.event import Event

__all__ = ["AttendanceRecord", "Event"]
