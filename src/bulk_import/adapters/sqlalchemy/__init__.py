"""SQLAlchemy adapter package for bulk-import."""

from __future__ import annotations

from .describe import describe_model
from .store import SelfValidating, SqlAlchemyImportStore, validation_messages
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    enable_sqlite_savepoints,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SelfValidating",
    "SqlAlchemyImportStore",
    "SqlAlchemyImportUnitOfWork",
    "StartupError",
    "configured_engine",
    "describe_model",
    "enable_sqlite_savepoints",
    "is_started",
    "shutdown",
    "startup",
    "validation_messages",
]
