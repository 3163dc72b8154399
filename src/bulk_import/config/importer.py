"""Settings that govern every import run."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .env import env_flag, env_int

DEFAULT_LINE_ITEM_LIMIT = 1000


@dataclass(frozen=True, slots=True)
class ImporterConfig:
    line_item_limit: int = DEFAULT_LINE_ITEM_LIMIT
    rollback_on_error: bool = False
    pass_filename: bool = False
    log_outcomes: bool = True
    log_file: Path | None = None


def get_importer_config() -> ImporterConfig:
    log_file = os.getenv("BULK_IMPORT_LOG_FILE")
    return ImporterConfig(
        line_item_limit=env_int(
            "BULK_IMPORT_LINE_ITEM_LIMIT", default=DEFAULT_LINE_ITEM_LIMIT, minimum=0
        ),
        rollback_on_error=env_flag("BULK_IMPORT_ROLLBACK_ON_ERROR", default=False),
        pass_filename=env_flag("BULK_IMPORT_PASS_FILENAME", default=False),
        log_outcomes=env_flag("BULK_IMPORT_LOG_OUTCOMES", default=True),
        log_file=Path(log_file).expanduser() if log_file else None,
    )
