"""Reconciliation settings for the importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Final

from .env import env_flag, env_float, optional_env_var
from .errors import ConfigurationError

DEFAULT_ID_PREFIX: Final[str] = "gi_id_"
DEFAULT_HOLDING_PREFIX: Final[str] = "gi_"
DEFAULT_HOLDING_TTL_SECONDS: Final[float] = 3600.0


@dataclass(frozen=True, slots=True)
class ImporterConfig:
    """Settings shared by identity tagging, the holding area and the lenient policies.

    ``strict_term_parents`` and ``strict_locale_master`` switch the two lenient
    behaviours (unresolved term parent falls back to root, unresolved locale master
    is skipped) to rejecting ones.
    """

    id_prefix: str = DEFAULT_ID_PREFIX
    holding_prefix: str = DEFAULT_HOLDING_PREFIX
    holding_ttl: timedelta = field(
        default_factory=lambda: timedelta(seconds=DEFAULT_HOLDING_TTL_SECONDS)
    )
    strict_term_parents: bool = False
    strict_locale_master: bool = False
    languages: tuple[str, ...] = ()
    locale_linking: bool = True

    def __post_init__(self) -> None:
        if not self.id_prefix.strip():
            raise ConfigurationError("id_prefix must not be blank")
        if self.holding_ttl <= timedelta(0):
            raise ConfigurationError("holding_ttl must be positive")


def get_importer_config() -> ImporterConfig:
    ttl_seconds = env_float("RECORDSYNC_HOLDING_TTL_SECONDS", default=DEFAULT_HOLDING_TTL_SECONDS)
    languages_value = optional_env_var("RECORDSYNC_LANGUAGES")
    languages = (
        tuple(code.strip() for code in languages_value.split(",") if code.strip())
        if languages_value
        else ()
    )
    return ImporterConfig(
        id_prefix=optional_env_var("RECORDSYNC_ID_PREFIX") or DEFAULT_ID_PREFIX,
        holding_prefix=optional_env_var("RECORDSYNC_HOLDING_PREFIX") or DEFAULT_HOLDING_PREFIX,
        holding_ttl=timedelta(seconds=ttl_seconds),
        strict_term_parents=env_flag("RECORDSYNC_STRICT_TERM_PARENTS"),
        strict_locale_master=env_flag("RECORDSYNC_STRICT_LOCALE_MASTER"),
        languages=languages,
        locale_linking=env_flag("RECORDSYNC_LOCALE_LINKING", default=True),
    )
