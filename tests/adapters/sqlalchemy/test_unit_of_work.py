from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, event, select
from sqlalchemy.orm import Session, sessionmaker

from bulk_import.adapters.sqlalchemy import (
    SqlAlchemyImportStore,
    SqlAlchemyImportUnitOfWork,
    StartupError,
    configured_engine,
    enable_sqlite_savepoints,
    is_started,
    shutdown,
    startup,
)
from bulk_import.adapters.sqlalchemy.unit_of_work import _emit_begin
from tests.helpers.models import Base, Owner

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _names(engine: Engine) -> list[str]:
    with Session(engine) as session:
        return list(session.scalars(select(Owner.name).order_by(Owner.name)))


def test_unit_of_work_requires_startup() -> None:
    shutdown()

    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyImportUnitOfWork()


def test_startup_refuses_reinitialisation(started_adapter: Engine) -> None:
    assert configured_engine() is started_adapter
    with pytest.raises(StartupError, match="already configured"):
        startup(engine=started_adapter)


def test_startup_creates_tables_from_metadata() -> None:
    engine = startup(
        database_uri="sqlite+pysqlite:///:memory:", metadata=Base.metadata, force=True
    )
    try:
        assert _names(engine) == []
        assert event.contains(engine, "begin", _emit_begin)
    finally:
        shutdown()


def test_savepoint_listeners_are_registered_once() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    enable_sqlite_savepoints(engine)
    enable_sqlite_savepoints(engine)

    assert event.contains(engine, "begin", _emit_begin)
    engine.dispose()


def test_commit_persists_and_rollback_discards(started_adapter: Engine) -> None:
    with SqlAlchemyImportUnitOfWork() as uow:
        assert isinstance(uow.store, SqlAlchemyImportStore)
        assert uow.store.save(Owner(name="Kim")).ok
        uow.commit()
        assert uow.store.save(Owner(name="Lee")).ok
        uow.rollback()

    assert _names(started_adapter) == ["Kim"]


def test_exception_inside_block_rolls_back(started_adapter: Engine) -> None:
    uow = SqlAlchemyImportUnitOfWork()
    with pytest.raises(RuntimeError), uow:
        uow.store.save(Owner(name="Kim"))
        raise RuntimeError("stop")

    assert _names(started_adapter) == []
    with pytest.raises(StartupError):
        _ = uow.store


def test_explicit_session_factory(sqlite_engine: Engine) -> None:
    factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)

    with SqlAlchemyImportUnitOfWork(factory) as uow:
        uow.store.save(Owner(name="Ada"))
        uow.commit()

    assert _names(sqlite_engine) == ["Ada"]
