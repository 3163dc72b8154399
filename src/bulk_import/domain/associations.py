"""Resolve human-entered association values to stored entities."""

from __future__ import annotations

from collections.abc import Mapping, Sequence, Set
from typing import TYPE_CHECKING

from bulk_import.domain.errors import AssociationNotFound

if TYPE_CHECKING:
    from bulk_import.domain.descriptor import AssociationField, ModelDescriptor
    from bulk_import.domain.model import ImportParams, Record
    from bulk_import.domain.ports import ImportStore


def is_blank(value: object) -> bool:
    """``None``, whitespace-only strings and empty collections count as not provided."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Mapping, Sequence, Set)) and not isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    return False


def extract_mapping(value: object, mapping_key: str) -> object:
    """Pick the mapping key out of a nested lookup, or pass a raw value through."""

    if isinstance(value, Mapping):
        return value.get(mapping_key)
    return value


def _as_list(value: object) -> list[object]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


class AssociationResolver:
    def __init__(self, store: ImportStore) -> None:
        self.store = store

    def resolve(self, association: AssociationField, mapping_key: str, value: object) -> object:
        if association.resolver is not None:
            found = association.resolver(self.store, association, mapping_key, value)
        else:
            found = self.store.find_first(association.target, {mapping_key: value})
        if found is None:
            raise AssociationNotFound(association.target.__name__, mapping_key, value)
        return found

    def wire_single(
        self,
        entity: object,
        record: Record,
        *,
        descriptor: ModelDescriptor,
        params: ImportParams,
    ) -> None:
        for association in descriptor.single_association_fields:
            mapping_key = params.mapping_key_for(association)
            value = extract_mapping(record.get(association.name), mapping_key)
            if is_blank(value):
                continue
            related = self.resolve(association, mapping_key, value)
            self.store.assign_association(entity, association, related)

    def wire_many(
        self,
        entity: object,
        record: Record,
        *,
        descriptor: ModelDescriptor,
        params: ImportParams,
    ) -> None:
        for association in descriptor.many_association_fields:
            if association.name not in record:
                continue
            mapping_key = params.mapping_key_for(association)
            values = [
                extract_mapping(value, mapping_key)
                for value in _as_list(record[association.name])
                if not is_blank(value)
            ]
            values = [value for value in values if not is_blank(value)]
            if not values:
                continue
            related = [self.resolve(association, mapping_key, value) for value in values]
            self.store.assign_association(entity, association, related)
