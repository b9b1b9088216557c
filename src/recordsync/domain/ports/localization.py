"""Port for the (optional) locale-linking collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from recordsync.domain.model import RecordId, TranslationGroup


@runtime_checkable
class LocaleCollaborator(Protocol):
    """Capability set {can-set-locale, can-link-translations}.

    ``is_active`` is the capability probe used when a deployment selects its
    collaborator; ``languages`` may be empty, meaning any well-formed locale code.
    """

    name: str

    def is_active(self) -> bool: ...

    def languages(self) -> tuple[str, ...]: ...

    def set_record_locale(self, record_id: RecordId, locale: str) -> None: ...

    def get_record_locale(self, record_id: RecordId) -> str | None: ...

    def get_translation_group(self, anchor_id: RecordId) -> TranslationGroup: ...

    def save_translation_group(
        self,
        anchor_id: RecordId,
        group: Mapping[str, RecordId],
    ) -> None: ...
