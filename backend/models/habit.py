from sqlalchemy import Column, Integer, String, Text, Date
from sqlalchemy.orm import relationship

from database import Base, UTCDateTime, utcnow


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    frequency = Column(String(20), nullable=False, default="daily")  # daily/weekly/monthly
    start_date = Column(Date, nullable=True)  # calendar date, not an instant
    rating_good = Column(Text, default="")  # what "good" means for this habit
    rating_okay = Column(Text, default="")
    rating_bad = Column(Text, default="")
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    logs = relationship(
        "HabitLog",
        back_populates="habit",
        cascade="all, delete-orphan",
        order_by="HabitLog.period_start",
    )
