"""Errors raised while reading recordsync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class InvalidSettingError(ConfigurationError):
    """An environment setting holds a value of the wrong kind."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid {expected} for {name}: {value!r}")
        self.name = name
        self.value = value
