"""Exception hierarchy raised by store adapters and carried by save results."""

from __future__ import annotations

from recordsync.config.errors import ConfigurationError


class ReconciliationError(RuntimeError):
    """Base class for reconciliation failures."""


class StoreError(ReconciliationError):
    """Raised by store adapters when a persistence primitive fails."""


class TermConflictError(StoreError):
    """Raised by a taxonomy store when a term slug already exists in the taxonomy."""

    def __init__(self, taxonomy: str, slug: str) -> None:
        super().__init__(f"Term {slug!r} already exists in taxonomy {taxonomy!r}")
        self.taxonomy = taxonomy
        self.slug = slug


class PersistenceError(ReconciliationError):
    """The record body could not be written; fatal for the current save."""


class SecondaryWriteError(ReconciliationError):
    """A metadata or taxonomy write failed after the record body was committed."""


class LocaleConfigurationError(ConfigurationError):
    """No recognised locale collaborator is available in this deployment."""
