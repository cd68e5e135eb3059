"""Database engine/session helpers."""
from contextlib import contextmanager
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from catalog.models import Base

from .config import get_settings


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Build an engine for the given URL; no connection is opened yet."""

    return create_engine(
        database_url,
        echo=echo,
        future=True,
        pool_pre_ping=True,
    )


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, class_=Session)


@lru_cache
def get_engine() -> Engine:
    """Return the engine configured from application settings."""

    settings = get_settings()
    return create_db_engine(settings.database_url, echo=settings.database_echo)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return create_session_factory(get_engine())


@contextmanager
def session_scope(session_factory: sessionmaker[Session] | None = None) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations.

    The session is committed when the block exits normally, rolled back when
    it raises, and closed on every exit path.
    """

    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_schema(engine: Engine | None = None) -> None:
    """Create any missing tables declared on the ORM metadata."""

    Base.metadata.create_all(engine or get_engine())
