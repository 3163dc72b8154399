from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from bulk_import.adapters.sqlalchemy import SqlAlchemyImportUnitOfWork, describe_model
from bulk_import.config import ImporterConfig
from bulk_import.domain import DuplicateCheck, Importer, ImportParams
from tests.helpers.models import Group, Owner, Project

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


@pytest.fixture
def seeded_engine(sqlite_engine: Engine) -> Engine:
    with Session(sqlite_engine) as session:
        ops = Group(name="ops", code="OPS")
        session.add_all([ops, Group(name="sales", code="SAL"), Owner(name="Kim")])
        session.add(Project(name="Jon Smith", email="jon@example.com", groups=[ops]))
        session.commit()
    return sqlite_engine


def _importer(engine: Engine, **config: object) -> Importer:
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    descriptor = describe_model(
        Project,
        duplicate_check=DuplicateCheck(group_fields=("groups",), association="groups"),
    )
    return Importer(
        descriptor,
        lambda: SqlAlchemyImportUnitOfWork(factory),
        config=ImporterConfig(**config),  # type: ignore[arg-type]
    )


def _projects(engine: Engine) -> dict[str, Project]:
    with Session(engine, expire_on_commit=False) as session:
        projects = session.scalars(select(Project)).all()
        for project in projects:
            _ = (project.owner, project.groups)
        return {project.name: project for project in projects}


def test_each_row_is_committed_or_rejected_on_its_own(seeded_engine: Engine) -> None:
    records: list[dict[str, object]] = [
        {"name": "Alpha", "email": "a@example.com", "owner": "Kim", "groups": ["SAL"]},
        {"name": "Beta", "email": "a@example.com"},
        {"name": "Gamma", "owner": "Nobody"},
        {"name": "Delta", "budget": -1},
        {"name": "Epsilon", "groups": [{"code": "OPS"}, ""]},
    ]

    result = _importer(seeded_engine).import_records(
        records, ImportParams(associations={"groups": "code"})
    )

    assert result.success == ("Created Alpha", "Created Epsilon")
    assert result.error[0].startswith("Failed to create Beta: UNIQUE constraint failed")
    assert result.error[0].endswith("(row 3)")
    assert result.error[1:] == (
        "Failed to create Gamma: Association not found. Owner.name = Nobody (row 4)",
        "Failed to create Delta: Budget must not be negative (row 5)",
    )
    projects = _projects(seeded_engine)
    assert set(projects) == {"Jon Smith", "Alpha", "Epsilon"}
    alpha = projects["Alpha"]
    assert alpha.owner is not None
    assert alpha.owner.name == "Kim"
    assert [group.name for group in alpha.groups] == ["sales"]
    assert [group.name for group in projects["Epsilon"].groups] == ["ops"]


def test_rollback_on_error_leaves_database_untouched(seeded_engine: Engine) -> None:
    result = _importer(seeded_engine, rollback_on_error=True).import_records(
        [{"name": "Alpha"}, {"name": "Beta", "owner": "Nobody"}, {"name": "Gamma"}]
    )

    assert result.rolled_back
    assert result.success == ()
    assert len(result.error) == 1
    assert set(_projects(seeded_engine)) == {"Jon Smith"}


def test_update_by_lookup_is_idempotent(seeded_engine: Engine) -> None:
    params = ImportParams(update_if_exists=True, update_lookup=("email",))
    record: dict[str, object] = {
        "email": "jon@example.com",
        "name": "Jon Smith",
        "budget": 10,
        "client": "",
    }

    first = _importer(seeded_engine).import_records([record], params)
    second = _importer(seeded_engine).import_records([record], params)

    assert first.success == second.success == ("Updated Jon Smith",)
    projects = _projects(seeded_engine)
    assert len(projects) == 1
    assert projects["Jon Smith"].budget == 10
    assert projects["Jon Smith"].client is None


def test_update_violating_constraint_is_rejected(seeded_engine: Engine) -> None:
    _importer(seeded_engine).import_records([{"name": "Alpha", "email": "a@example.com"}])
    params = ImportParams(update_if_exists=True, update_lookup=("name",))

    result = _importer(seeded_engine).import_records(
        [
            {"name": "Alpha", "email": "jon@example.com"},
            {"name": "Jon Smith", "budget": 3},
        ],
        params,
    )

    [error] = result.error
    assert error.startswith("Failed to update Alpha: UNIQUE constraint failed")
    assert result.success == ("Updated Jon Smith",)
    projects = _projects(seeded_engine)
    assert projects["Alpha"].email == "a@example.com"
    assert projects["Jon Smith"].budget == 3


def test_similar_project_in_same_group_is_flagged(seeded_engine: Engine) -> None:
    result = _importer(seeded_engine).import_records(
        [{"name": "John Smith", "groups": ["ops"]}, {"name": "John Smith", "groups": ["sales"]}]
    )

    assert result.warning == ("1 project found with similar full name: John Smith (row 2)",)
    assert result.success == ("Created John Smith", "Created John Smith")
    [match] = result.fuzzy_matches
    assert [c.name for c in match.candidates if isinstance(c, Project)] == ["Jon Smith"]
