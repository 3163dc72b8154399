"""Static description of the entity type an import targets."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from bulk_import.config.errors import ConfigurationError

if TYPE_CHECKING:
    from bulk_import.domain.ports import ImportStore

type AssociationPolicy = Callable[[ImportStore, AssociationField, str, object], object | None]

_LABEL_FALLBACKS = ("name", "title")


@dataclass(frozen=True, slots=True, kw_only=True)
class AssociationField:
    """A field referencing other persisted entities.

    ``resolver`` overrides how a raw value is matched to the related entity;
    without one the store is asked for the first ``target`` whose mapping key
    attribute equals the value.
    """

    name: str
    target: type
    many: bool = False
    default_mapping_key: str = "name"
    resolver: AssociationPolicy | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DuplicateCheck:
    """Enables near-duplicate warnings for newly created entities.

    Records carrying group membership under one of ``group_fields`` are compared
    against stored entities linked to the same groups through ``association``.
    """

    group_fields: tuple[str, ...]
    association: str
    name_attribute: str = "full_name"
    threshold: float = 0.85


@dataclass(frozen=True, slots=True, kw_only=True)
class ModelDescriptor:
    model: type
    display_name: str
    scalar_fields: frozenset[str] = frozenset()
    single_association_fields: tuple[AssociationField, ...] = ()
    many_association_fields: tuple[AssociationField, ...] = ()
    label_attribute: str | None = None
    plural_name: str | None = None
    duplicate_check: DuplicateCheck | None = None
    _field_names: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        single = {association.name for association in self.single_association_fields}
        many = {association.name for association in self.many_association_fields}
        overlap = (self.scalar_fields & single) | (self.scalar_fields & many) | (single & many)
        if overlap:
            names = ", ".join(sorted(overlap))
            raise ConfigurationError(f"{self.display_name}: fields declared twice: {names}")
        if any(association.many for association in self.single_association_fields):
            raise ConfigurationError(f"{self.display_name}: many-valued field in single list")
        if self.duplicate_check is not None and self.duplicate_check.association not in many:
            raise ConfigurationError(
                f"{self.display_name}: duplicate check needs many-valued association "
                f"{self.duplicate_check.association!r}"
            )
        object.__setattr__(self, "_field_names", frozenset(self.scalar_fields | single | many))

    @property
    def field_names(self) -> frozenset[str]:
        return self._field_names

    @property
    def association_fields(self) -> tuple[AssociationField, ...]:
        return (*self.single_association_fields, *self.many_association_fields)

    def association(self, name: str) -> AssociationField:
        for association in self.association_fields:
            if association.name == name:
                return association
        raise KeyError(name)

    def label_for(self, entity: object) -> str:
        attributes = (self.label_attribute,) if self.label_attribute else _LABEL_FALLBACKS
        for attribute in attributes:
            value = getattr(entity, attribute, None)
            if value is not None and value != "":
                return str(value)
        return str(entity)

    def pluralized(self, count: int) -> str:
        if count == 1:
            return self.display_name
        return self.plural_name or f"{self.display_name}s"
