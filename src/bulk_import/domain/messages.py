"""User-facing message texts.

Translations live outside the engine; callers pass their own ``MessageCatalog``
to render reports in another locale.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from bulk_import.domain.model import ImportAction


class MessageCatalog(Protocol):
    def import_success(self, action: ImportAction, *, name: str) -> str: ...

    def import_error(self, action: ImportAction, *, name: str, error: str) -> str: ...

    def general_error(self, *, error: str) -> str: ...

    def line_item_limit(self, *, limit: int) -> str: ...

    def association_not_found(self, *, error: str) -> str: ...

    def missing_update_lookup(self) -> str: ...

    def old_import_hook(self, *, model: str, method: str) -> str: ...

    def summary(self, kind: str, *, name: str) -> str:
        """Flash summary; ``kind`` is ``"successful"`` or ``"error"``."""
        ...


class EnglishMessages:
    """Default English texts of the admin upload screen."""

    _SUCCESS = {"create": "Created {name}", "update": "Updated {name}"}
    _ERROR = {
        "create": "Failed to create {name}: {error}",
        "update": "Failed to update {name}: {error}",
    }
    _SUMMARY = {
        "successful": "{name} successfully {action}",
        "error": "{name} failed to be {action}",
    }

    def import_success(self, action: ImportAction, *, name: str) -> str:
        return self._SUCCESS[action.value].format(name=name)

    def import_error(self, action: ImportAction, *, name: str, error: str) -> str:
        return self._ERROR[action.value].format(name=name, error=error)

    def general_error(self, *, error: str) -> str:
        return f"Error during import: {error}"

    def line_item_limit(self, *, limit: int) -> str:
        return f"Please limit upload file to {limit} line items."

    def association_not_found(self, *, error: str) -> str:
        return f"Association not found. {error}"

    def missing_update_lookup(self) -> str:
        return "Your file must contain a column for the 'Update lookup field' you selected."

    def old_import_hook(self, *, model: str, method: str) -> str:
        return (
            f"The import hook {model}.{method} should take only 1 argument. "
            "Data may not be imported correctly."
        )

    def summary(self, kind: str, *, name: str) -> str:
        return self._SUMMARY[kind].format(name=name, action="imported")
