"""Ports the import engine needs from a persistence layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bulk_import.domain.descriptor import AssociationField


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Outcome of persisting one entity; ``messages`` explain a rejection."""

    ok: bool
    messages: tuple[str, ...] = ()

    @classmethod
    def saved(cls) -> SaveResult:
        return cls(ok=True)

    @classmethod
    def rejected(cls, messages: Sequence[str]) -> SaveResult:
        return cls(ok=False, messages=tuple(messages))


@runtime_checkable
class ImportStore(Protocol):
    """Query, build and persist entities of arbitrary model types."""

    def find_first(self, model: type, criteria: Mapping[str, object]) -> object | None:
        """Return the first entity of ``model`` whose attributes equal ``criteria``."""
        ...

    def new(self, model: type) -> object: ...

    def is_new(self, entity: object) -> bool: ...

    def assign_attributes(self, entity: object, attributes: Mapping[str, object]) -> None: ...

    def assign_association(
        self, entity: object, association: AssociationField, value: object
    ) -> None: ...

    def save(self, entity: object) -> SaveResult:
        """Validate and persist ``entity`` without ending the surrounding transaction."""
        ...

    def revert_pending(self) -> None:
        """Drop unsaved changes left behind by a record that did not save."""
        ...

    def find_in_groups(
        self,
        model: type,
        association: str,
        mapping_key: str,
        values: Sequence[object],
    ) -> Sequence[object]:
        """Return stored ``model`` entities linked through ``association`` to any group
        whose ``mapping_key`` attribute is one of ``values``."""
        ...
