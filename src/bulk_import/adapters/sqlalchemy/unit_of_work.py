"""Engine lifecycle and the SQLAlchemy unit of work used by import runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from bulk_import.adapters.sqlalchemy.store import SqlAlchemyImportStore
from bulk_import.config.storage import get_database_config

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy import MetaData
    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup`` or started twice."""


@dataclass(frozen=True, slots=True)
class _Binding:
    engine: Engine
    sessions: sessionmaker[Session]


@dataclass(slots=True)
class _AdapterState:
    binding: _Binding | None = None

    def require(self) -> _Binding:
        if self.binding is None:
            raise StartupError(
                "No database configured for bulk_import; call "
                "bulk_import.adapters.sqlalchemy.startup() first."
            )
        return self.binding


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    metadata: MetaData | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to ``engine`` (or a new one for ``database_uri``).

    Without either, ``DATABASE_URI`` or the default SQLite file is used. Tables of
    ``metadata`` that do not exist yet are created.
    """

    if _STATE.binding is not None and not force:
        raise StartupError("bulk_import database already configured; pass force=True")

    bound = engine or create_engine(database_uri or get_database_config().uri, future=True)
    enable_sqlite_savepoints(bound)
    if metadata is not None:
        metadata.create_all(bound)

    _STATE.binding = _Binding(
        engine=bound, sessions=sessionmaker(bind=bound, expire_on_commit=False)
    )
    log.debug("Import adapter bound to %s", bound.url.render_as_string(hide_password=True))
    return bound


def configured_engine() -> Engine | None:
    return None if _STATE.binding is None else _STATE.binding.engine


def is_started() -> bool:
    return _STATE.binding is not None


def shutdown() -> None:
    """Dispose the bound engine and forget it."""

    binding, _STATE.binding = _STATE.binding, None
    if binding is not None:
        binding.engine.dispose()


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let pysqlite honour SAVEPOINT by emitting BEGIN ourselves.

    Must run before the engine opens its first connection.
    """

    if engine.dialect.name != "sqlite" or event.contains(engine, "begin", _emit_begin):
        return
    event.listen(engine, "connect", _disable_pysqlite_transactions)
    event.listen(engine, "begin", _emit_begin)


def _disable_pysqlite_transactions(dbapi_connection: object, _connection_record: object) -> None:
    dbapi_connection.isolation_level = None  # type: ignore[attr-defined]


def _emit_begin(connection: Connection) -> None:
    connection.exec_driver_sql("BEGIN")


class SqlAlchemyImportUnitOfWork:
    """One session per import run; the store is only available inside ``with``."""

    supports_rollback = True

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _STATE.require().sessions
        self._session: Session | None = None
        self._store: SqlAlchemyImportStore | None = None

    def __enter__(self) -> SqlAlchemyImportUnitOfWork:
        if self._session is not None:
            raise StartupError("Import unit of work is already open")
        self._session = self.session_factory()
        self._store = SqlAlchemyImportStore(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._store = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Import unit of work used outside its with-block")
        return self._session

    @property
    def store(self) -> SqlAlchemyImportStore:
        if self._store is None:
            raise StartupError("Import unit of work used outside its with-block")
        return self._store

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from bulk_import.domain.ports import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
