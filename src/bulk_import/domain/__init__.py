"""Import engine: resolve records into entities and report per-row outcomes."""

from __future__ import annotations

from .descriptor import AssociationField, AssociationPolicy, DuplicateCheck, ModelDescriptor
from .errors import (
    AssociationNotFound,
    BatchLimitExceeded,
    BulkImportError,
    SkipRecord,
    UpdateLookupError,
)
from .hooks import Hook
from .messages import EnglishMessages, MessageCatalog
from .model import (
    FuzzyMatch,
    ImportAction,
    ImportParams,
    ImportRequest,
    ImportResult,
    OutcomeStatus,
    Record,
    RecordOutcome,
)
from .orchestrator import Importer, UnitOfWorkFactory

__all__ = [
    "AssociationField",
    "AssociationNotFound",
    "AssociationPolicy",
    "BatchLimitExceeded",
    "BulkImportError",
    "DuplicateCheck",
    "EnglishMessages",
    "FuzzyMatch",
    "Hook",
    "ImportAction",
    "ImportParams",
    "ImportRequest",
    "ImportResult",
    "Importer",
    "MessageCatalog",
    "ModelDescriptor",
    "OutcomeStatus",
    "Record",
    "RecordOutcome",
    "SkipRecord",
    "UnitOfWorkFactory",
    "UpdateLookupError",
]
