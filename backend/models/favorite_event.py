from sqlalchemy import Column, Integer, String, Text

from database import Base, UTCDateTime, utcnow


class FavoriteEvent(Base):
    """Reusable event template; quick-adding one copies it onto a day."""

    __tablename__ = "favorite_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(120), nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)
