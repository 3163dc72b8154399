"""Build a ``ModelDescriptor`` from a mapped class."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect

from bulk_import.domain.descriptor import AssociationField, ModelDescriptor

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from bulk_import.domain.descriptor import DuplicateCheck


def describe_model(
    model: type,
    *,
    display_name: str | None = None,
    exclude: Iterable[str] = (),
    mapping_keys: Mapping[str, str] | None = None,
    label_attribute: str | None = None,
    plural_name: str | None = None,
    duplicate_check: DuplicateCheck | None = None,
) -> ModelDescriptor:
    """Describe ``model`` for import.

    Plain columns become scalar fields; primary and foreign key columns are left
    out because rows reference related entities through their associations.
    Relationships become single or many association fields depending on
    ``uselist``; view-only relationships are skipped. ``mapping_keys`` sets the
    default lookup attribute per association (``"name"`` otherwise).
    """

    mapper = inspect(model)
    excluded = set(exclude)
    keys = dict(mapping_keys or {})

    scalar_fields = frozenset(
        attribute.key
        for attribute in mapper.column_attrs
        if attribute.key not in excluded
        and not any(column.primary_key or column.foreign_keys for column in attribute.columns)
    )

    single: list[AssociationField] = []
    many: list[AssociationField] = []
    for relationship in mapper.relationships:
        if relationship.key in excluded or relationship.viewonly:
            continue
        association = AssociationField(
            name=relationship.key,
            target=relationship.mapper.class_,
            many=bool(relationship.uselist),
            default_mapping_key=keys.get(relationship.key, "name"),
        )
        (many if association.many else single).append(association)

    return ModelDescriptor(
        model=model,
        display_name=display_name or model.__name__,
        scalar_fields=scalar_fields,
        single_association_fields=tuple(single),
        many_association_fields=tuple(many),
        label_attribute=label_attribute,
        plural_name=plural_name,
        duplicate_check=duplicate_check,
    )
