"""Orchestrator for one import unit: identify, validate, upsert, link.

The engine composes stage objects but does not prescribe concrete adapters;
``build_reconciler`` wires the default stages to a repository collection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from recordsync.domain.model import ErrorScope, SaveSucceeded, SaveWarning, WarningKind

from .hooks import BodyHooks
from .identity import IdentityKeys, IdentityResolver
from .locale import LocaleLinkManager
from .taxonomy import TaxonomyResolver
from .upsert import UpsertEngine
from .validation import default_validator

if TYPE_CHECKING:
    from recordsync.config import ImporterConfig
    from recordsync.domain.model import ImportUnit, LinkResult, SaveResult
    from recordsync.domain.ports import ImportRepositories

    from .validation import Validator


@dataclass(slots=True)
class ImportReconciler:
    """Reconcile a single unit, synchronously.

    Concurrent calls for the same external id must be serialised by the caller:
    the identity lookup and the create are not atomic.
    """

    upsert: UpsertEngine
    linker: LocaleLinkManager

    def reconcile(self, unit: ImportUnit) -> SaveResult:
        result = self.upsert.save(unit)
        if not isinstance(result, SaveSucceeded) or unit.locale is None:
            return result

        link = self.linker.link(result.internal_id, unit.locale)
        if link.is_warning:
            self._record_link_warning(unit, result, link)
        return result

    @staticmethod
    def _record_link_warning(unit: ImportUnit, result: SaveSucceeded, link: LinkResult) -> None:
        message = link.message or f"Locale link ended with status {link.status}."
        unit.add_error(ErrorScope.LOCALE, str(link.status), message)
        result.warnings.append(
            SaveWarning(
                kind=WarningKind.LINK,
                scope=ErrorScope.LOCALE,
                key=str(link.status),
                message=message,
            )
        )


def build_reconciler(
    repositories: ImportRepositories,
    config: ImporterConfig,
    *,
    hooks: BodyHooks | None = None,
    validator: Validator | None = None,
) -> ImportReconciler:
    identity = IdentityResolver(
        records=repositories.records,
        keys=IdentityKeys(config.id_prefix),
    )
    upsert = UpsertEngine(
        records=repositories.records,
        metadata=repositories.metadata,
        holding=repositories.holding,
        identity=identity,
        validator=validator or default_validator(config, resolver=identity),
        taxonomy=TaxonomyResolver(
            store=repositories.taxonomy,
            strict_parents=config.strict_term_parents,
        ),
        holding_prefix=config.holding_prefix,
        holding_ttl=config.holding_ttl,
        hooks=hooks or BodyHooks(),
    )
    linker = LocaleLinkManager.from_candidates(
        repositories.locale_collaborators,
        identity=identity,
        languages=config.languages,
    )
    return ImportReconciler(upsert=upsert, linker=linker)
