"""Collect per-row outcomes of one import run and render the final summary."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bulk_import.domain.model import ImportResult, OutcomeStatus, RecordOutcome

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bulk_import.domain.descriptor import ModelDescriptor
    from bulk_import.domain.import_logger import ImportLogger
    from bulk_import.domain.messages import MessageCatalog
    from bulk_import.domain.model import FuzzyMatch, ImportAction


def with_row(text: str, row: int | None) -> str:
    return text if row is None else f"{text} (row {row})"


class ResultAggregator:
    """Append-only success, warning and error lists for a single run.

    Every report is mirrored to the outcome log. The only removal is
    ``discard_successes`` which the orchestrator calls when it rolls a batch back.
    """

    def __init__(
        self,
        descriptor: ModelDescriptor,
        *,
        messages: MessageCatalog,
        logger: ImportLogger,
    ) -> None:
        self.descriptor = descriptor
        self.messages = messages
        self.logger = logger
        self.success: list[str] = []
        self.warning: list[str] = []
        self.error: list[str] = []
        self.outcomes: list[RecordOutcome] = []

    @property
    def has_problems(self) -> bool:
        return bool(self.error or self.warning)

    def report_success(self, entity: object, action: ImportAction, *, row: int | None) -> None:
        label = self.descriptor.label_for(entity)
        message = self.messages.import_success(action, name=label)
        self._record(self.success, OutcomeStatus.SUCCESS, message, row=row, action=action)

    def report_error(
        self,
        entity: object,
        action: ImportAction,
        error: str,
        *,
        row: int | None,
    ) -> None:
        label = self.descriptor.label_for(entity)
        message = self.messages.import_error(action, name=label, error=with_row(error, row))
        self._record(self.error, OutcomeStatus.ERROR, message, row=row, action=action)

    def report_warning(
        self,
        warning: str,
        *,
        row: int | None,
        action: ImportAction | None = None,
    ) -> None:
        message = with_row(warning, row)
        self._record(self.warning, OutcomeStatus.WARNING, message, row=row, action=action)

    def report_general_error(self, error: str, *, row: int | None = None) -> None:
        message = self.messages.general_error(error=with_row(error, row))
        self._record(self.error, OutcomeStatus.ERROR, message, row=row, action=None)

    def discard_successes(self) -> None:
        self.success.clear()

    def finalize(
        self,
        *,
        rolled_back: bool = False,
        fuzzy_matches: Iterable[FuzzyMatch] = (),
    ) -> ImportResult:
        warnings = len(self.warning)
        warning_message = f"{warnings} warning{'s' if warnings > 1 else ''}" if warnings else None
        return ImportResult(
            success=tuple(self.success),
            warning=tuple(self.warning),
            error=tuple(self.error),
            success_message=self._summary("successful", self.success),
            warning_message=warning_message,
            error_message=self._summary("error", self.error),
            outcomes=tuple(self.outcomes),
            fuzzy_matches=tuple(fuzzy_matches),
            rolled_back=rolled_back,
        )

    def _summary(self, kind: str, entries: list[str]) -> str | None:
        if not entries:
            return None
        count = len(entries)
        return self.messages.summary(kind, name=f"{count} {self.descriptor.pluralized(count)}")

    def _record(
        self,
        bucket: list[str],
        status: OutcomeStatus,
        message: str,
        *,
        row: int | None,
        action: ImportAction | None,
    ) -> None:
        self.logger.info(message)
        bucket.append(message)
        self.outcomes.append(RecordOutcome(row=row, action=action, status=status, message=message))
