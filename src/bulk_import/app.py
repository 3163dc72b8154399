"""Application orchestration entry points."""

from __future__ import annotations

import importlib
import json
from logging import getLogger
from typing import TYPE_CHECKING, cast

from bulk_import.adapters.sqlalchemy import (
    SqlAlchemyImportUnitOfWork,
    describe_model,
    is_started,
    startup,
)
from bulk_import.config import ConfigurationError, get_importer_config
from bulk_import.domain import Importer, ImportParams

if TYPE_CHECKING:
    from pathlib import Path

    from bulk_import.config import ImporterConfig
    from bulk_import.domain import DuplicateCheck, ImportResult, Record

log = getLogger(__name__)


def load_model(path: str) -> type:
    """Import ``package.module:ClassName`` and return the class."""

    module_name, _, attribute = path.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(f"Model must be given as module:ClassName, got {path!r}")
    module = importlib.import_module(module_name)
    model = getattr(module, attribute, None)
    if not isinstance(model, type):
        raise ConfigurationError(f"{path!r} does not name a class")
    return model


def load_records(path: Path) -> list[Record]:
    """Read records from a JSON array of objects."""

    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a JSON array of objects")
    records: list[Record] = []
    for index, item in enumerate(cast(list[object], payload)):
        if not isinstance(item, dict):
            raise ValueError(f"{path}: item {index} is not an object")
        records.append(cast("Record", item))
    return records


def import_records(
    model: type,
    records: list[Record],
    *,
    params: ImportParams | None = None,
    config: ImporterConfig | None = None,
    database_uri: str | None = None,
    create_tables: bool = False,
    duplicate_check: DuplicateCheck | None = None,
) -> ImportResult:
    """Import ``records`` into the SQLAlchemy mapped ``model``."""

    if not is_started():
        metadata = getattr(model, "metadata", None) if create_tables else None
        startup(database_uri=database_uri, metadata=metadata)
    effective_config = config or get_importer_config()
    descriptor = describe_model(model, duplicate_check=duplicate_check)
    importer = Importer(descriptor, SqlAlchemyImportUnitOfWork, config=effective_config)
    log.info("Starting import of %s records into %s", len(records), descriptor.display_name)
    return importer.import_records(records, params or ImportParams())
