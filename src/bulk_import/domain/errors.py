"""Errors raised while importing records."""

from __future__ import annotations

from bulk_import.config.errors import ConfigurationError


class BulkImportError(Exception):
    """Base class for import engine failures."""


class BatchLimitExceeded(BulkImportError):
    """Raised when a batch holds more records than the configured ceiling."""

    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"{count} records exceed the line item limit of {limit}")


class AssociationNotFound(BulkImportError):
    """Raised when a raw value does not resolve to an existing related entity."""

    def __init__(self, target: str, mapping_key: str, value: object) -> None:
        self.target = target
        self.mapping_key = mapping_key
        self.value = value
        super().__init__(f"{target}.{mapping_key} = {value}")


class UpdateLookupError(ConfigurationError):
    """Raised when a record lacks one of the configured update lookup fields."""


class SkipRecord(Exception):  # noqa: N818
    """Control signal: stop processing the current record without reporting it."""
