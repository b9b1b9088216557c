"""Locale marking and translation-group linking.

A deployment has zero or one active locale collaborator. The collaborator is
selected once, by capability, and handed to the manager; with none selected
every link call is a recorded no-op rather than a failure.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from recordsync.domain.model import (
    LinkResult,
    LinkStatus,
    LocaleConfigurationError,
    LocaleInfo,
    StoreError,
)
from recordsync.domain.ports import LocaleCollaborator

from .validation import LOCALE_PATTERN

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recordsync.domain.model import RecordId, TranslationGroup

    from .identity import IdentityResolver

log = getLogger(__name__)


def select_locale_collaborator(candidates: Sequence[object]) -> LocaleCollaborator:
    """Return the first active collaborator, in priority order.

    Raises ``LocaleConfigurationError`` when no candidate implements the
    collaborator contract and reports itself active.
    """

    active = [
        candidate
        for candidate in candidates
        if isinstance(candidate, LocaleCollaborator) and candidate.is_active()
    ]
    if not active:
        raise LocaleConfigurationError(
            "No translation collaborator is active; install and enable one to link locales."
        )
    if len(active) > 1:
        log.warning(
            "Several locale collaborators are active (%s); using %s",
            ", ".join(collaborator.name for collaborator in active),
            active[0].name,
        )
    return active[0]


class LocaleLinkManager:
    def __init__(
        self,
        collaborator: LocaleCollaborator | None,
        *,
        identity: IdentityResolver,
        languages: Sequence[str] = (),
        configuration_error: LocaleConfigurationError | None = None,
    ) -> None:
        self.collaborator = collaborator
        self.identity = identity
        self.languages = tuple(languages)
        self.configuration_error = configuration_error

    @classmethod
    def from_candidates(
        cls,
        candidates: Sequence[object],
        *,
        identity: IdentityResolver,
        languages: Sequence[str] = (),
    ) -> LocaleLinkManager:
        try:
            collaborator = select_locale_collaborator(candidates)
        except LocaleConfigurationError as exc:
            log.warning("Locale linking disabled: %s", exc)
            return cls(None, identity=identity, languages=languages, configuration_error=exc)
        log.debug("Using locale collaborator %s", collaborator.name)
        return cls(collaborator, identity=identity, languages=languages)

    def link(self, record_id: RecordId, info: object | None) -> LinkResult:
        if info is None:
            return LinkResult(status=LinkStatus.SKIPPED)
        if self.collaborator is None:
            message = str(self.configuration_error or "No locale collaborator is active.")
            return LinkResult(status=LinkStatus.UNAVAILABLE, message=message)
        problem = self._shape_problem(info)
        if problem is not None or not isinstance(info, LocaleInfo):
            return LinkResult(status=LinkStatus.INVALID, message=problem)

        try:
            return self._link(self.collaborator, record_id, info)
        except StoreError as exc:
            log.warning("Linking record %s into locale %s failed: %s", record_id, info.locale, exc)
            return LinkResult(status=LinkStatus.FAILED, message=str(exc))

    def _link(
        self,
        collaborator: LocaleCollaborator,
        record_id: RecordId,
        info: LocaleInfo,
    ) -> LinkResult:
        collaborator.set_record_locale(record_id, info.locale)
        if not info.has_master:
            return LinkResult(status=LinkStatus.LOCALE_SET)

        master_external_id = self.identity.keys.strip_prefix(info.master_external_id or "")
        master_id = self.identity.resolve(master_external_id)
        if master_id is None:
            log.info(
                "Master %r for record %s not imported yet; translation link deferred",
                master_external_id,
                record_id,
            )
            return LinkResult(
                status=LinkStatus.MASTER_UNRESOLVED,
                message=f"Master record {master_external_id!r} was not found.",
            )
        if master_id == record_id:
            return LinkResult(status=LinkStatus.LOCALE_SET)

        current = dict(collaborator.get_translation_group(master_id))
        merged = merge_translation_group(
            current,
            master_id=master_id,
            master_locale=collaborator.get_record_locale(master_id),
            record_id=record_id,
            locale=info.locale,
        )
        if merged is None:
            return LinkResult(
                status=LinkStatus.CONFLICT,
                message=f"Locale {info.locale!r} is already held by the master record {master_id}.",
                group=current,
            )
        if merged != current:
            collaborator.save_translation_group(master_id, merged)
            log.info("Linked record %s (%s) to master %s", record_id, info.locale, master_id)
        return LinkResult(status=LinkStatus.LINKED, group=merged)

    def _shape_problem(self, info: object) -> str | None:
        if not isinstance(info, LocaleInfo):
            return "Locale data is not in a recognised format."
        if not isinstance(info.locale, str) or not LOCALE_PATTERN.match(info.locale):
            return f"Invalid locale code {info.locale!r}."
        known = self.languages or (self.collaborator.languages() if self.collaborator else ())
        if known and info.locale not in known:
            return f"Locale {info.locale!r} is not an enabled language."
        return None


def merge_translation_group(
    current: TranslationGroup,
    *,
    master_id: RecordId,
    master_locale: str | None,
    record_id: RecordId,
    locale: str,
) -> TranslationGroup | None:
    """Merge ``{locale: record_id}`` into ``current`` without dropping other locales.

    The master holds its current locale; an entry of the master under an older
    locale is dropped, and so is any entry of ``record_id`` under a different
    locale. Returns ``None`` when ``locale`` is the master's own locale.
    """

    merged = {
        code: member
        for code, member in current.items()
        if member != record_id and not (master_locale and member == master_id)
    }
    if master_locale:
        merged[master_locale] = master_id
    if merged.get(locale) == master_id:
        return None
    merged[locale] = record_id
    return merged
