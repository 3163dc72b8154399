"""Batch loop that imports a sequence of records into one model."""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from bulk_import.config import ImporterConfig
from bulk_import.domain.context import ImportRun
from bulk_import.domain.errors import BatchLimitExceeded, SkipRecord
from bulk_import.domain.hooks import Hook, HookDispatcher, fire_global_hook
from bulk_import.domain.import_logger import ImportLogger
from bulk_import.domain.messages import EnglishMessages
from bulk_import.domain.model import FIRST_DATA_ROW, ImportParams, ImportResult
from bulk_import.domain.processor import RecordProcessor, RowStatus
from bulk_import.domain.results import ResultAggregator

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bulk_import.domain.context import RowContext
    from bulk_import.domain.descriptor import ModelDescriptor
    from bulk_import.domain.messages import MessageCatalog
    from bulk_import.domain.model import ImportRequest, Record
    from bulk_import.domain.ports import ImportUnitOfWork

type UnitOfWorkFactory = Callable[[], ImportUnitOfWork]

log = logging.getLogger(__name__)


class AttemptStatus(StrEnum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RowAttempt:
    """What happened to one record at the row boundary."""

    status: AttemptStatus
    saved: bool = False
    fault: Exception | None = None


class Importer:
    """Imports records into the model described by ``descriptor``.

    Every record is attempted even if earlier ones fail. With
    ``rollback_on_error`` enabled and a unit of work that can roll back, the whole
    run is one transaction that is discarded as soon as any row produced an error
    or a warning; otherwise each saved row is committed on its own.
    """

    def __init__(
        self,
        descriptor: ModelDescriptor,
        unit_of_work_factory: UnitOfWorkFactory,
        *,
        config: ImporterConfig | None = None,
        messages: MessageCatalog | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.unit_of_work_factory = unit_of_work_factory
        self.config = config or ImporterConfig()
        self.messages = messages or EnglishMessages()
        self.logger = ImportLogger(
            enabled=self.config.log_outcomes, log_file=self.config.log_file
        )

    def run(self, request: ImportRequest) -> ImportResult:
        return self.import_records(request.records, request.params)

    def import_records(
        self,
        records: Sequence[Record],
        params: ImportParams | None = None,
    ) -> ImportResult:
        params = params or ImportParams()
        try:
            self.check_batch_size(len(records))
        except BatchLimitExceeded as exc:
            log.warning("Import of %s rejected: %s", self.descriptor.display_name, exc)
            return ImportResult(error=(self.messages.line_item_limit(limit=exc.limit),))

        aggregator = ResultAggregator(self.descriptor, messages=self.messages, logger=self.logger)
        run = ImportRun(params=params, aggregator=aggregator, hooks=HookDispatcher(aggregator))
        log.info(
            "Importing %s records into %s (update_lookup=%s, rollback_on_error=%s)",
            len(records),
            self.descriptor.display_name,
            params.lookup_fields,
            self.config.rollback_on_error,
        )

        self._fire_global(Hook.BEFORE_IMPORT, aggregator)
        rolled_back = False
        with self.unit_of_work_factory() as uow:
            transactional = self._transactional(uow)
            processor = RecordProcessor(self.descriptor, uow.store, config=self.config)
            for row, record in enumerate(records, start=FIRST_DATA_ROW):
                self._attempt_row(uow, processor, record, run.at_row(row), transactional)
            if transactional:
                rolled_back = self._commit_or_rollback(uow, aggregator)
        self._fire_global(Hook.AFTER_IMPORT, aggregator)

        result = aggregator.finalize(rolled_back=rolled_back, fuzzy_matches=run.fuzzy_matches)
        log.info(
            "Finished import of %s: success=%s, warnings=%s, errors=%s, rolled_back=%s",
            self.descriptor.display_name,
            len(result.success),
            len(result.warning),
            len(result.error),
            rolled_back,
        )
        return result

    def check_batch_size(self, count: int) -> None:
        """Raise ``BatchLimitExceeded`` when ``count`` records exceed the ceiling."""

        if count > self.config.line_item_limit:
            raise BatchLimitExceeded(count, self.config.line_item_limit)

    def _transactional(self, uow: ImportUnitOfWork) -> bool:
        if not self.config.rollback_on_error:
            return False
        if not uow.supports_rollback:
            log.warning("rollback_on_error requested but the unit of work cannot roll back")
            return False
        return True

    def _attempt_row(
        self,
        uow: ImportUnitOfWork,
        processor: RecordProcessor,
        record: Record,
        context: RowContext,
        transactional: bool,
    ) -> RowAttempt:
        try:
            status = processor.process(record, context)
        except SkipRecord:
            log.debug("Row %s skipped by hook", context.row)
            attempt = RowAttempt(AttemptStatus.SKIPPED, saved=context.saved)
        except Exception as exc:  # noqa: BLE001
            log.warning("Row %s failed", context.row, exc_info=exc)
            context.aggregator.report_general_error(describe_fault(exc), row=context.row)
            attempt = RowAttempt(AttemptStatus.FAILED, saved=context.saved, fault=exc)
        else:
            attempt = RowAttempt(AttemptStatus.COMPLETED, saved=status is RowStatus.SAVED)

        if transactional:
            if not attempt.saved:
                uow.store.revert_pending()
            return attempt
        if not attempt.saved:
            uow.rollback()
            return attempt
        try:
            uow.commit()
        except Exception as exc:  # noqa: BLE001
            log.warning("Row %s could not be committed", context.row, exc_info=exc)
            context.aggregator.report_general_error(describe_fault(exc), row=context.row)
            uow.rollback()
            return RowAttempt(AttemptStatus.FAILED, fault=exc)
        return attempt

    def _commit_or_rollback(self, uow: ImportUnitOfWork, aggregator: ResultAggregator) -> bool:
        if aggregator.has_problems:
            aggregator.discard_successes()
            uow.rollback()
            log.info(
                "Rolled back import of %s: %s errors, %s warnings",
                self.descriptor.display_name,
                len(aggregator.error),
                len(aggregator.warning),
            )
            return True
        uow.commit()
        return False

    def _fire_global(self, hook: Hook, aggregator: ResultAggregator) -> None:
        try:
            fire_global_hook(self.descriptor.model, hook)
        except Exception as exc:  # noqa: BLE001
            log.warning("%s hook failed", hook.value, exc_info=exc)
            aggregator.report_general_error(describe_fault(exc))


def describe_fault(exc: BaseException) -> str:
    """Render an unexpected fault with the place it was raised from."""

    frames = traceback.extract_tb(exc.__traceback__)
    if not frames:
        return f"{exc} ({type(exc).__name__})"
    origin = frames[-1]
    return f"{exc} ({type(exc).__name__} at {origin.filename}:{origin.lineno})"
