from sqlalchemy import Column, Integer, String, Text, Boolean, Index

from database import Base, UTCDateTime, utcnow


class BacklogItem(Base):
    __tablename__ = "backlog_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(60), nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_backlog_category_completed", "category", "is_completed"),
    )
