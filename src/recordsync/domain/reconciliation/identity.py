"""External-id to internal-id resolution.

The identity index lives in record metadata: a record imported from the source
system carries a *base* tag (``gi_id`` -> external id, shared by every imported
record) and a *qualified* tag (``gi_id_<external id>`` -> external id), which is
the authoritative lookup key.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recordsync.domain.model import RecordId
    from recordsync.domain.ports import RecordStore

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IdentityKeys:
    """Derives the index keys for a fixed id prefix."""

    id_prefix: str

    @property
    def base_key(self) -> str:
        return self.id_prefix.rstrip("_")

    def qualified_key(self, external_id: str) -> str:
        return f"{self.id_prefix}{external_id}"

    def strip_prefix(self, value: str) -> str:
        """Turn a qualified key back into the external id; plain ids pass through."""

        value = value.strip()
        if value.startswith(self.id_prefix) and len(value) > len(self.id_prefix):
            return value[len(self.id_prefix) :]
        return value


@dataclass(slots=True)
class IdentityResolver:
    """Maps an external id to an existing internal record id. No side effects."""

    records: RecordStore
    keys: IdentityKeys

    def resolve(self, external_id: str) -> RecordId | None:
        if not external_id or not external_id.strip():
            return None
        matches = list(self.records.find_by_index_key(self.keys.qualified_key(external_id)))
        if not matches:
            log.debug("No record indexed for external id %s", external_id)
            return None
        if len(matches) > 1:
            log.warning(
                "External id %s is indexed on %d records (%s); using %s",
                external_id,
                len(matches),
                ", ".join(str(match) for match in matches),
                matches[0],
            )
        return matches[0]
