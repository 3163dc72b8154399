"""Optional lifecycle hooks that models may implement.

Each lifecycle point is its own runtime-checkable protocol; a model opts in by
defining the method. Type-level hooks (``before_import``, ``after_import`` and
``before_import_find``) are looked up on the model class and must therefore be
class or static methods.

Older integrations declared record hooks with a second positional parameter.
Those are still called, with an empty mapping as the second argument, and the
run reports a single compatibility warning.
"""

from __future__ import annotations

import inspect
import logging
from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

    from bulk_import.domain.model import Record
    from bulk_import.domain.results import ResultAggregator

log = logging.getLogger(__name__)


class Hook(StrEnum):
    BEFORE_IMPORT = "before_import"
    AFTER_IMPORT = "after_import"
    BEFORE_IMPORT_FIND = "before_import_find"
    BEFORE_IMPORT_ATTRIBUTES = "before_import_attributes"
    BEFORE_IMPORT_ASSOCIATIONS = "before_import_associations"
    BEFORE_IMPORT_SAVE = "before_import_save"
    AFTER_IMPORT_SAVE = "after_import_save"
    AFTER_IMPORT_ASSOCIATION_ERROR = "after_import_association_error"
    AFTER_IMPORT_ERROR = "after_import_error"


@runtime_checkable
class BeforeImport(Protocol):
    def before_import(self) -> None: ...


@runtime_checkable
class AfterImport(Protocol):
    def after_import(self) -> None: ...


@runtime_checkable
class BeforeImportFind(Protocol):
    def before_import_find(self, record: Record) -> None: ...


@runtime_checkable
class BeforeImportAttributes(Protocol):
    def before_import_attributes(self, record: Record) -> None: ...


@runtime_checkable
class BeforeImportAssociations(Protocol):
    def before_import_associations(self, record: Record) -> None: ...


@runtime_checkable
class BeforeImportSave(Protocol):
    def before_import_save(self, record: Record) -> None: ...


@runtime_checkable
class AfterImportSave(Protocol):
    def after_import_save(self, record: Record) -> None: ...


@runtime_checkable
class AfterImportAssociationError(Protocol):
    def after_import_association_error(self, record: Record) -> None: ...


@runtime_checkable
class AfterImportError(Protocol):
    def after_import_error(self, record: Record) -> None: ...


_GLOBAL_HOOKS: dict[Hook, type] = {
    Hook.BEFORE_IMPORT: BeforeImport,
    Hook.AFTER_IMPORT: AfterImport,
}

_RECORD_HOOKS: dict[Hook, type] = {
    Hook.BEFORE_IMPORT_FIND: BeforeImportFind,
    Hook.BEFORE_IMPORT_ATTRIBUTES: BeforeImportAttributes,
    Hook.BEFORE_IMPORT_ASSOCIATIONS: BeforeImportAssociations,
    Hook.BEFORE_IMPORT_SAVE: BeforeImportSave,
    Hook.AFTER_IMPORT_SAVE: AfterImportSave,
    Hook.AFTER_IMPORT_ASSOCIATION_ERROR: AfterImportAssociationError,
    Hook.AFTER_IMPORT_ERROR: AfterImportError,
}


def fire_global_hook(model: type, hook: Hook) -> None:
    """Call ``before_import``/``after_import`` on the model class if it has one."""

    if not isinstance(model, _GLOBAL_HOOKS[hook]):
        return
    log.debug("Running %s.%s", model.__name__, hook.value)
    getattr(model, hook.value)()


def is_legacy_hook(method: Callable[..., object]) -> bool:
    """Return True for hooks written against the two-argument signature."""

    try:
        return _positional_arity(method) == 2  # noqa: PLR2004
    except (TypeError, ValueError):
        return False


class HookDispatcher:
    """Per-run record hook invocation, remembering if a legacy hook was seen."""

    def __init__(self, aggregator: ResultAggregator) -> None:
        self._aggregator = aggregator
        self._legacy_reported = False

    def fire(self, target: object, hook: Hook, record: Record, *, row: int | None) -> None:
        if not isinstance(target, _RECORD_HOOKS[hook]):
            return
        method = getattr(target, hook.value)
        if is_legacy_hook(method):
            self._report_legacy(hook, row=row)
            method(record, {})
        else:
            method(record)

    def _report_legacy(self, hook: Hook, *, row: int | None) -> None:
        if self._legacy_reported:
            return
        self._legacy_reported = True
        descriptor = self._aggregator.descriptor
        message = self._aggregator.messages.old_import_hook(
            model=descriptor.display_name, method=hook.value
        )
        log.warning("Legacy import hook detected: %s.%s", descriptor.display_name, hook.value)
        self._aggregator.report_warning(message, row=row)


def _positional_arity(method: Callable[..., object]) -> int:
    underlying = getattr(method, "__func__", method)
    bound = underlying is not method
    arity = _function_arity(underlying)
    return arity - 1 if bound else arity


@lru_cache(maxsize=256)
def _function_arity(function: Callable[..., object]) -> int:
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    parameters = inspect.signature(function).parameters.values()
    return sum(1 for parameter in parameters if parameter.kind in positional)
