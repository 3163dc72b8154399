"""Transaction boundary around one import run."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from bulk_import.domain.ports.persistence import ImportStore


@runtime_checkable
class ImportUnitOfWork(Protocol):
    """Owns the store for one run and decides what becomes durable.

    ``supports_rollback`` is false for stores that write through immediately; the
    orchestrator then cannot discard a failed batch and skips the all-or-nothing
    mode.
    """

    @property
    def store(self) -> ImportStore: ...

    @property
    def supports_rollback(self) -> bool: ...

    def __enter__(self) -> ImportUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
