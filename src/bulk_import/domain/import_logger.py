"""Append-only, timestamped record of every reported outcome."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from bulk_import.config.logging import OUTCOME_LOGGER_NAME

if TYPE_CHECKING:
    from pathlib import Path


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ImportLogger:
    """Writes outcome lines to the ``bulk_import.outcomes`` logger.

    The line carries its own timestamp so a plain ``FileHandler`` (attached when
    ``log_file`` is given) yields a readable audit trail.
    """

    def __init__(
        self,
        *,
        enabled: bool = True,
        log_file: Path | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.enabled = enabled
        self._clock = clock
        self._log = logging.getLogger(OUTCOME_LOGGER_NAME)
        if enabled and log_file is not None:
            _ensure_file_handler(self._log, log_file)

    def info(self, message: str) -> None:
        if not self.enabled:
            return
        self._log.info("%s: %s", self._clock().isoformat(timespec="seconds"), message)


def _ensure_file_handler(logger: logging.Logger, log_file: Path) -> None:
    target = str(log_file.resolve())
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
