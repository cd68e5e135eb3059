"""Core application utilities and infrastructure."""
from .config import Settings, get_settings
from .db import (
    create_db_engine,
    create_schema,
    create_session_factory,
    get_engine,
    get_session_factory,
    session_scope,
)
from .logging import setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "create_db_engine",
    "create_schema",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "session_scope",
    "setup_logging",
]
