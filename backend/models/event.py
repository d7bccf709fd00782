from sqlalchemy import Column, Integer, String, Text, Boolean, Date, ForeignKey, Index

from database import Base, UTCDateTime, utcnow


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    day = Column(Date, nullable=False)  # calendar day the user picked
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(String(5), nullable=True)  # HH:MM
    end_time = Column(String(5), nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    favorite_id = Column(Integer, ForeignKey("favorite_events.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_events_day_start", "day", "start_time"),
    )
