"""Turn one input record into a saved entity."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from bulk_import.domain.associations import AssociationResolver, is_blank
from bulk_import.domain.duplicates import DuplicateCandidateMatcher
from bulk_import.domain.errors import AssociationNotFound, UpdateLookupError
from bulk_import.domain.hooks import Hook
from bulk_import.domain.model import FILENAME_FIELD, ImportAction

if TYPE_CHECKING:
    from bulk_import.config import ImporterConfig
    from bulk_import.domain.context import RowContext
    from bulk_import.domain.descriptor import ModelDescriptor
    from bulk_import.domain.model import Record
    from bulk_import.domain.ports import ImportStore

log = logging.getLogger(__name__)


class RowStatus(StrEnum):
    SAVED = "saved"
    REJECTED = "rejected"


class RecordProcessor:
    """Create or update the entity described by one record.

    ``process`` reports its own outcome. Anything it raises (including
    ``UpdateLookupError`` and ``SkipRecord`` from hooks) is left to the caller's
    row boundary.
    """

    def __init__(
        self,
        descriptor: ModelDescriptor,
        store: ImportStore,
        *,
        config: ImporterConfig,
    ) -> None:
        self.descriptor = descriptor
        self.store = store
        self.config = config
        self.associations = AssociationResolver(store)
        self.duplicates = DuplicateCandidateMatcher(store, descriptor)

    def process(self, record: Record, context: RowContext) -> RowStatus:
        params = context.params
        hooks = context.hooks
        row = context.row
        if params.filename and self.config.pass_filename:
            record = {**record, FILENAME_FIELD: params.filename}

        hooks.fire(self.descriptor.model, Hook.BEFORE_IMPORT_FIND, record, row=row)

        lookup = params.lookup_fields
        if lookup and any(field not in record for field in lookup):
            raise UpdateLookupError(context.aggregator.messages.missing_update_lookup())

        entity, action = self.find_or_create(record, lookup, context)
        self.duplicates.check(entity, record, action, context)

        try:
            hooks.fire(entity, Hook.BEFORE_IMPORT_ASSOCIATIONS, record, row=row)
            self.associations.wire_single(
                entity, record, descriptor=self.descriptor, params=params
            )
            self.associations.wire_many(entity, record, descriptor=self.descriptor, params=params)
        except AssociationNotFound as exc:
            error = context.aggregator.messages.association_not_found(error=str(exc))
            context.aggregator.report_error(entity, action, error, row=row)
            hooks.fire(entity, Hook.AFTER_IMPORT_ASSOCIATION_ERROR, record, row=row)
            return RowStatus.REJECTED

        hooks.fire(entity, Hook.BEFORE_IMPORT_SAVE, record, row=row)

        result = self.store.save(entity)
        if result.ok:
            context.mark_saved()
            context.aggregator.report_success(entity, action, row=row)
            hooks.fire(entity, Hook.AFTER_IMPORT_SAVE, record, row=row)
            return RowStatus.SAVED

        log.debug("Row %s rejected: %s", row, result.messages)
        context.aggregator.report_error(entity, action, ", ".join(result.messages), row=row)
        hooks.fire(entity, Hook.AFTER_IMPORT_ERROR, record, row=row)
        return RowStatus.REJECTED

    def find_or_create(
        self,
        record: Record,
        lookup: tuple[str, ...] | None,
        context: RowContext,
    ) -> tuple[object, ImportAction]:
        """Return the entity to write to and whether it is being created or updated.

        The first stored entity whose lookup fields equal the record's values is
        updated; otherwise a new one is built. Lookup fields are never reassigned
        on update.
        """

        model = self.descriptor.model
        entity = None
        if lookup:
            entity = self.store.find_first(model, {field: record[field] for field in lookup})
        if entity is None:
            entity = self.store.new(model)

        context.hooks.fire(entity, Hook.BEFORE_IMPORT_ATTRIBUTES, record, row=context.row)

        action = ImportAction.CREATE if self.store.is_new(entity) else ImportAction.UPDATE
        attributes = {
            name: value
            for name, value in record.items()
            if name in self.descriptor.scalar_fields and (value is False or not is_blank(value))
        }
        if action is ImportAction.UPDATE and lookup:
            for field in lookup:
                attributes.pop(field, None)
        self.store.assign_attributes(entity, attributes)
        return entity, action
