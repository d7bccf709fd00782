import os
import logging
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import create_engine, DateTime
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from config import DATABASE_URL

logger = logging.getLogger(__name__)

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back aware UTC. SQLite drops tzinfo otherwise."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Database:
    """
    Explicit handle around the engine and session factory.
    The host process owns the lifecycle: init() on startup, dispose() on shutdown.
    """

    def __init__(self, url: str = DATABASE_URL, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine = None
        self.SessionLocal = None

    def init(self):
        """Create the engine, the session factory and all tables."""
        # Only use connect_args if we are using SQLite
        engine_args = {}
        if self.url.startswith("sqlite"):
            engine_args["connect_args"] = {"check_same_thread": False}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, or every session sees an empty database
                engine_args["poolclass"] = StaticPool
            else:
                path = self.url.split("///", 1)[-1]
                directory = os.path.dirname(path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
        else:
            # Production settings for PostgreSQL
            engine_args.update({
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
                "pool_recycle": 1800,
            })

        try:
            self.engine = create_engine(self.url, echo=self.echo, **engine_args)
            self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        except Exception as e:
            logger.error(f"Failed to create engine: {e}")
            raise

        # Import all models so they register with Base.metadata
        from models.habit import Habit  # noqa: F401
        from models.habit_log import HabitLog  # noqa: F401
        from models.event import Event  # noqa: F401
        from models.favorite_event import FavoriteEvent  # noqa: F401
        from models.backlog_item import BacklogItem  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database initialized successfully.")
        return self

    def session(self) -> Session:
        if self.SessionLocal is None:
            raise RuntimeError("Database.init() has not been called")
        return self.SessionLocal()

    def dispose(self):
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database connections closed.")
        self.engine = None
        self.SessionLocal = None


def get_db(request: Request):
    """FastAPI dependency — yields a session from the app's Database and closes it after use."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
