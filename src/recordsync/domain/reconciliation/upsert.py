"""Create-or-update of one import unit.

State flow per call::

    staged -> (rejected)
           -> identifying -> persisting -> [tagging] -> metadata -> taxonomies -> done

A rejected unit is stashed in the holding area and nothing else is written. A
failed body write ends the call. Metadata, tagging and taxonomy failures are
recorded as warnings because the body is already committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from recordsync.domain.model import (
    ErrorScope,
    PersistenceError,
    SaveFailed,
    SaveRejected,
    SaveSucceeded,
    SaveWarning,
    StoreError,
    WarningKind,
)

from .hooks import BodyHooks

if TYPE_CHECKING:
    from datetime import timedelta

    from recordsync.domain.model import ImportUnit, RecordBody, RecordId, SaveResult
    from recordsync.domain.ports import HoldingArea, MetadataStore, RecordStore

    from .identity import IdentityResolver
    from .taxonomy import TaxonomyResolver
    from .validation import Validator

log = getLogger(__name__)


@dataclass(slots=True)
class UpsertEngine:
    records: RecordStore
    metadata: MetadataStore
    holding: HoldingArea
    identity: IdentityResolver
    validator: Validator
    taxonomy: TaxonomyResolver
    holding_prefix: str
    holding_ttl: timedelta
    hooks: BodyHooks = field(default_factory=BodyHooks)

    def save(self, unit: ImportUnit) -> SaveResult:
        unit.body = self.hooks.filter_body(unit.body)
        try:
            self._identify(unit)
            self.validator.validate(unit)
        except StoreError as exc:
            error = PersistenceError(f"Could not look up {unit.external_id!r}: {exc}")
            log.error("Saving %r failed: %s", unit.external_id, error)  # noqa: TRY400
            return SaveFailed(error=error)
        if not unit.is_valid:
            return self._reject(unit)

        try:
            record_id, created = self._persist(unit)
        except PersistenceError as exc:
            log.error("Saving %r failed: %s", unit.external_id, exc)  # noqa: TRY400
            return SaveFailed(error=exc)
        unit.internal_id = record_id

        result = SaveSucceeded(internal_id=record_id, created=created)
        if created:
            result.warnings.extend(self._tag(unit.external_id, record_id))
        result.warnings.extend(self._write_metadata(unit, record_id))
        self._write_taxonomies(unit, record_id, result)

        log.info(
            "%s record %s for external id %r (%d warnings)",
            "Created" if created else "Updated",
            record_id,
            unit.external_id,
            len(result.warnings),
        )
        return result

    def holding_key(self, external_id: str) -> str:
        return f"{self.holding_prefix}invalid_record_{external_id}"

    def _identify(self, unit: ImportUnit) -> None:
        if unit.internal_id is None:
            if not isinstance(unit.external_id, str) or not unit.external_id.strip():
                return
            unit.internal_id = self.identity.resolve(unit.external_id)
        if unit.internal_id is not None and self.records.get(unit.internal_id) is None:
            log.warning(
                "Record %s indexed for %r no longer exists; creating a new one",
                unit.internal_id,
                unit.external_id,
            )
            unit.internal_id = None

    def _reject(self, unit: ImportUnit) -> SaveRejected:
        key = self.holding_key(unit.external_id or "")
        try:
            self.holding.stash(key, unit.snapshot(), self.holding_ttl)
        except StoreError:
            log.exception("Could not stash invalid unit %r", unit.external_id)
            return SaveRejected(errors=unit.errors)
        log.warning("Rejected unit %r; snapshot held under %s", unit.external_id, key)
        return SaveRejected(errors=unit.errors, snapshot_key=key)

    def _persist(self, unit: ImportUnit) -> tuple[RecordId, bool]:
        existing: RecordBody | None = None
        if unit.internal_id is not None:
            try:
                existing = self.records.get(unit.internal_id)
            except StoreError as exc:
                raise PersistenceError(f"Could not load record {unit.internal_id}") from exc

        record_id = unit.internal_id
        self.records.add_write_hook(self.hooks.pre_write)
        try:
            if existing is None or record_id is None:
                return self.records.create(unit.body), True
            self.records.update(record_id, existing.overlay(unit.body))
            return record_id, False
        except StoreError as exc:
            raise PersistenceError(f"Could not write record body: {exc}") from exc
        finally:
            self.records.remove_write_hook(self.hooks.pre_write)

    def _tag(self, external_id: str, record_id: RecordId) -> list[SaveWarning]:
        keys = self.identity.keys
        warnings: list[SaveWarning] = []
        for key in (keys.base_key, keys.qualified_key(external_id)):
            try:
                self.metadata.set(record_id, key, external_id)
            except StoreError as exc:
                log.warning("Identity tag %s on record %s failed: %s", key, record_id, exc)
                warnings.append(
                    SaveWarning(
                        kind=WarningKind.SECONDARY_WRITE,
                        scope=ErrorScope.IDENTITY,
                        key=key,
                        message="The identity tag could not be written.",
                    )
                )
        return warnings

    def _write_metadata(self, unit: ImportUnit, record_id: RecordId) -> list[SaveWarning]:
        warnings: list[SaveWarning] = []
        for entry in unit.metadata:
            try:
                self.metadata.set(record_id, entry.key, entry.value)
            except StoreError as exc:
                log.warning("Metadata %s on record %s failed: %s", entry.key, record_id, exc)
                warnings.append(
                    SaveWarning(
                        kind=WarningKind.SECONDARY_WRITE,
                        scope=ErrorScope.METADATA,
                        key=entry.key,
                        message="The metadata value could not be written.",
                    )
                )
        return warnings

    def _write_taxonomies(
        self,
        unit: ImportUnit,
        record_id: RecordId,
        result: SaveSucceeded,
    ) -> None:
        for taxonomy, terms in unit.taxonomies.items():
            attached = self.taxonomy.resolve_and_attach(record_id, taxonomy, terms)
            result.terms.extend(attached)
            for outcome in attached:
                if outcome.error is None:
                    continue
                result.warnings.append(
                    SaveWarning(
                        kind=WarningKind.SECONDARY_WRITE,
                        scope=ErrorScope.TAXONOMY,
                        key=outcome.term.name,
                        message=outcome.error,
                    )
                )
