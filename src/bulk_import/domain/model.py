"""Value objects exchanged between the caller and the import engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from bulk_import.config.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bulk_import.domain.descriptor import AssociationField

type Record = dict[str, object]

HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1
FILENAME_FIELD = "filename_importer"


class ImportAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"


class OutcomeStatus(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportParams:
    """Run parameters collected from the upload form.

    ``associations`` maps association field names to the attribute used to look
    up the related entity (the mapping key).
    """

    update_if_exists: bool = False
    update_lookup: tuple[str, ...] = ()
    associations: Mapping[str, str] = field(default_factory=dict[str, str])
    skip_fuzzy_search: bool = False
    filename: str | None = None

    def __post_init__(self) -> None:
        if self.update_if_exists and not self.update_lookup:
            raise ConfigurationError("update_if_exists requires at least one update lookup field")

    @property
    def lookup_fields(self) -> tuple[str, ...] | None:
        return self.update_lookup if self.update_if_exists else None

    def mapping_key_for(self, association: AssociationField) -> str:
        return self.associations.get(association.name, association.default_mapping_key)


@dataclass(frozen=True, slots=True)
class ImportRequest:
    records: Sequence[Record]
    params: ImportParams = field(default_factory=ImportParams)


@dataclass(frozen=True, slots=True)
class RecordOutcome:
    """One reported line; ``row`` is ``None`` for run-wide messages."""

    row: int | None
    action: ImportAction | None
    status: OutcomeStatus
    message: str


@dataclass(frozen=True, slots=True)
class FuzzyMatch:
    """A freshly created entity that looks like entities already stored."""

    entity: object
    candidates: tuple[object, ...]
    row: int


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportResult:
    success: tuple[str, ...] = ()
    warning: tuple[str, ...] = ()
    error: tuple[str, ...] = ()
    success_message: str | None = None
    warning_message: str | None = None
    error_message: str | None = None
    outcomes: tuple[RecordOutcome, ...] = ()
    fuzzy_matches: tuple[FuzzyMatch, ...] = ()
    rolled_back: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.error)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warning)

    def as_dict(self) -> dict[str, object]:
        """Render the flash-message payload shown after an upload."""

        payload: dict[str, object] = {
            "success": list(self.success),
            "warning": list(self.warning),
            "error": list(self.error),
        }
        if self.success_message is not None:
            payload["success_message"] = self.success_message
        if self.warning_message is not None:
            payload["warning_message"] = self.warning_message
        if self.error_message is not None:
            payload["error_message"] = self.error_message
        return payload
