"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import ImportStore, SaveResult
from .unit_of_work import ImportUnitOfWork

__all__ = [
    "ImportStore",
    "ImportUnitOfWork",
    "SaveResult",
]
