"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when the importer is set up or called inconsistently."""


class InvalidSettingError(ConfigurationError):
    """Raised when an environment variable holds a value that cannot be parsed."""

    def __init__(self, name: str, raw: str, expected: str) -> None:
        self.name = name
        self.raw = raw
        super().__init__(f"{name} must be {expected}, got {raw!r}")
