"""Logging setup for the recordsync CLI."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import InvalidSettingError

LOG_LEVEL_VAR = "RECORDSYNC_LOG_LEVEL"


def _level_from_env(default: int) -> int:
    value = optional_env_var(LOG_LEVEL_VAR)
    if value is None:
        return default
    level = logging.getLevelNamesMapping().get(value.upper())
    if level is None:
        raise InvalidSettingError(LOG_LEVEL_VAR, value, "log level")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger for CLI output.

    Without an explicit ``level`` the ``RECORDSYNC_LOG_LEVEL`` setting is used,
    falling back to INFO. Alembic's own INFO chatter is kept at WARNING.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_env(logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("alembic").setLevel(logging.WARNING)
