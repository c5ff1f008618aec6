from sqlalchemy import BigInteger, Column, Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from checkin.database.session import Base


class AttendanceRecord(Base):
    __tablename__ = "AttendanceRecords"
    __table_args__ = (
        # one check-in per user per event per session
        UniqueConstraint("event_id", "user_id", "session_date", name="uq_attendance_session"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(32), ForeignKey("Events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    session_date = Column(Date, nullable=False)
    checked_in_at_ms = Column(BigInteger, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    distance_meters = Column(Float, nullable=False)
    qr_code_used = Column(String(200))

    event = relationship("Event", back_populates="attendance_records")
