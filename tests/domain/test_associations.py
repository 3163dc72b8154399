from __future__ import annotations

import pytest

from bulk_import.domain import AssociationField, AssociationNotFound, ImportParams
from bulk_import.domain.associations import AssociationResolver, extract_mapping, is_blank
from tests.helpers.fakes import InMemoryStore, Person, Tag, Team, person_descriptor


@pytest.mark.parametrize(
    ("value", "blank"),
    [
        (None, True),
        ("", True),
        ("   ", True),
        ([], True),
        ({}, True),
        (False, False),
        (0, False),
        ("x", False),
        (["x"], False),
    ],
)
def test_is_blank(value: object, *, blank: bool) -> None:
    assert is_blank(value) is blank


def test_extract_mapping_reads_nested_key() -> None:
    assert extract_mapping({"code": "A1", "name": "a"}, "code") == "A1"
    assert extract_mapping({"name": "a"}, "code") is None
    assert extract_mapping("A1", "code") == "A1"


def test_resolve_raises_with_lookup_description(memory_store: InMemoryStore) -> None:
    resolver = AssociationResolver(memory_store)
    team = AssociationField(name="team", target=Team)

    with pytest.raises(AssociationNotFound) as caught:
        resolver.resolve(team, "name", "Ghosts")

    assert str(caught.value) == "Team.name = Ghosts"
    assert caught.value.value == "Ghosts"


def test_custom_resolver_replaces_store_lookup(memory_store: InMemoryStore) -> None:
    core = Team(name="Core")

    def case_insensitive(
        store: object, association: AssociationField, mapping_key: str, value: object
    ) -> object | None:
        return core if str(value).lower() == "core" else None

    resolver = AssociationResolver(memory_store)
    team = AssociationField(name="team", target=Team, resolver=case_insensitive)

    assert resolver.resolve(team, "name", "CORE") is core
    assert memory_store.queries == []


def test_wire_single_skips_blank_and_uses_mapping_key(memory_store: InMemoryStore) -> None:
    core = Team(name="Core")
    memory_store.add_existing(core)
    resolver = AssociationResolver(memory_store)
    descriptor = person_descriptor()
    params = ImportParams()

    blank = Person()
    resolver.wire_single(blank, {"team": " "}, descriptor=descriptor, params=params)
    nested = Person()
    resolver.wire_single(nested, {"team": {"name": "Core"}}, descriptor=descriptor, params=params)

    assert blank.team is None
    assert nested.team is core


def test_wire_many_leaves_absent_field_untouched(memory_store: InMemoryStore) -> None:
    tag = Tag(name="a")
    memory_store.add_existing(tag)
    resolver = AssociationResolver(memory_store)
    descriptor = person_descriptor()
    person = Person(tags=[tag])

    resolver.wire_many(person, {"name": "Ada"}, descriptor=descriptor, params=ImportParams())
    resolver.wire_many(person, {"tags": ["", None]}, descriptor=descriptor, params=ImportParams())

    assert person.tags == [tag]


def test_wire_many_accepts_single_value(memory_store: InMemoryStore) -> None:
    tag = Tag(name="a")
    memory_store.add_existing(tag)
    person = Person()

    AssociationResolver(memory_store).wire_many(
        person, {"tags": "a"}, descriptor=person_descriptor(), params=ImportParams()
    )

    assert person.tags == [tag]


def test_wire_many_fails_on_first_unknown_value(memory_store: InMemoryStore) -> None:
    memory_store.add_existing(Tag(name="a"))
    person = Person()

    with pytest.raises(AssociationNotFound, match=r"Tag\.name = b"):
        AssociationResolver(memory_store).wire_many(
            person, {"tags": ["a", "b"]}, descriptor=person_descriptor(), params=ImportParams()
        )

    assert person.tags == []
