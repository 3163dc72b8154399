"""State owned by a single import call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bulk_import.domain.hooks import HookDispatcher
    from bulk_import.domain.model import FuzzyMatch, ImportParams
    from bulk_import.domain.results import ResultAggregator


@dataclass(slots=True)
class ImportRun:
    """Mutable run state; never shared between two import calls."""

    params: ImportParams
    aggregator: ResultAggregator
    hooks: HookDispatcher
    fuzzy_matches: list[FuzzyMatch] = field(default_factory=list["FuzzyMatch"])
    saved_rows: set[int] = field(default_factory=set[int])

    def at_row(self, row: int) -> RowContext:
        return RowContext(run=self, row=row)


@dataclass(frozen=True, slots=True)
class RowContext:
    """The run plus the row currently being processed, used for attribution."""

    run: ImportRun
    row: int

    @property
    def params(self) -> ImportParams:
        return self.run.params

    @property
    def aggregator(self) -> ResultAggregator:
        return self.run.aggregator

    @property
    def hooks(self) -> HookDispatcher:
        return self.run.hooks

    @property
    def saved(self) -> bool:
        return self.row in self.run.saved_rows

    def mark_saved(self) -> None:
        self.run.saved_rows.add(self.row)
