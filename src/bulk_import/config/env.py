"""Typed readers for ``BULK_IMPORT_*`` environment variables."""

from __future__ import annotations

import os

from .errors import InvalidSettingError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def env_flag(name: str, *, default: bool) -> bool:
    """Read a boolean switch such as ``1``/``0`` or ``true``/``false``."""

    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidSettingError(name, raw, "a boolean flag")


def env_int(name: str, *, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise InvalidSettingError(name, raw, "an integer") from exc
    if minimum is not None and value < minimum:
        raise InvalidSettingError(name, raw, f">= {minimum}")
    return value
