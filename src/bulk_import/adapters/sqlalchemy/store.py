"""Import store backed by a SQLAlchemy session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from bulk_import.domain.ports import SaveResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from sqlalchemy.orm import Mapper, Session

    from bulk_import.domain.descriptor import AssociationField

log = logging.getLogger(__name__)


@runtime_checkable
class SelfValidating(Protocol):
    """Models may add their own checks on top of the NOT NULL columns."""

    def validation_errors(self) -> Iterable[str]: ...


def humanize(attribute: str) -> str:
    return attribute.replace("_", " ").strip().capitalize()


class SqlAlchemyImportStore:
    """Queries run without autoflush so half-built entities of the current record
    never reach the database before ``save``. Each save runs in a SAVEPOINT so a
    rejected row leaves the surrounding transaction usable."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def find_first(self, model: type, criteria: Mapping[str, object]) -> object | None:
        stmt = select(model).filter_by(**criteria).limit(1)
        with self.session.no_autoflush:
            return self.session.scalars(stmt).first()

    def new(self, model: type) -> object:
        return model()

    def is_new(self, entity: object) -> bool:
        return inspect(entity).key is None

    def assign_attributes(self, entity: object, attributes: Mapping[str, object]) -> None:
        for name, value in attributes.items():
            setattr(entity, name, value)

    def assign_association(
        self, entity: object, association: AssociationField, value: object
    ) -> None:
        setattr(entity, association.name, value)

    def save(self, entity: object) -> SaveResult:
        messages = validation_messages(entity)
        if messages:
            return SaveResult.rejected(messages)
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except IntegrityError as exc:
            log.debug("Integrity error while saving %r", entity, exc_info=exc)
            return SaveResult.rejected([str(exc.orig)])
        return SaveResult.saved()

    def revert_pending(self) -> None:
        if not self.session.is_active:
            log.debug("Session left inactive by a failed flush, rolling back")
            self.session.rollback()
            return
        for entity in list(self.session.new):
            self.session.expunge(entity)
        for entity in list(self.session.dirty):
            self.session.expire(entity)

    def find_in_groups(
        self,
        model: type,
        association: str,
        mapping_key: str,
        values: Sequence[object],
    ) -> Sequence[object]:
        relationship = getattr(model, association)
        target = relationship.property.mapper.class_
        stmt = select(model).join(relationship).where(getattr(target, mapping_key).in_(values))
        with self.session.no_autoflush:
            return self.session.scalars(stmt).unique().all()


def validation_messages(entity: object) -> list[str]:
    """Return "<Field> can't be blank" for required columns left empty plus any
    messages from the model's own ``validation_errors``."""

    mapper: Mapper[object] = inspect(type(entity))
    messages: list[str] = []
    for attribute in mapper.column_attrs:
        if not all(_required(column) for column in attribute.columns):
            continue
        if getattr(entity, attribute.key, None) is None:
            messages.append(f"{humanize(attribute.key)} can't be blank")
    if isinstance(entity, SelfValidating):
        messages.extend(entity.validation_errors())
    return messages


def _required(column: object) -> bool:
    return not (
        getattr(column, "nullable", True)
        or getattr(column, "primary_key", False)
        or getattr(column, "foreign_keys", None)
        or getattr(column, "default", None) is not None
        or getattr(column, "server_default", None) is not None
    )
