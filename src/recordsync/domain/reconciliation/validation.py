"""Validation of staged import units.

The validator owns only the aggregation discipline: every rule runs, every
finding is appended to ``unit.errors[scope][key]``, and nothing short-circuits.
The concrete field rules are a policy (``default_rules``) that callers may
replace or extend.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from recordsync.domain.model import ErrorScope, ImportUnit, LocaleInfo, RecordStatus, TermRef

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recordsync.config import ImporterConfig

    from .identity import IdentityKeys, IdentityResolver

log = getLogger(__name__)

type RuleCheck = Callable[[ImportUnit], Mapping[str, str]]

SLUG_PATTERN: Final = re.compile(r"^[^\s/]+$")
TAXONOMY_PATTERN: Final = re.compile(r"^[a-z0-9_\-]{1,32}$")
RECORD_TYPE_PATTERN: Final = re.compile(r"^[a-z0-9_\-]{1,20}$")
LOCALE_PATTERN: Final = re.compile(r"^[A-Za-z]{2,3}(?:[_-][A-Za-z0-9]{2,8})?$")


@dataclass(frozen=True, slots=True)
class ValidationRule:
    scope: ErrorScope
    check: RuleCheck
    name: str = ""


@dataclass(slots=True)
class Validator:
    rules: list[ValidationRule] = field(default_factory=list["ValidationRule"])

    def add_rule(self, scope: ErrorScope, check: RuleCheck, *, name: str = "") -> None:
        self.rules.append(ValidationRule(scope=scope, check=check, name=name))

    def validate(self, unit: ImportUnit) -> ImportUnit:
        for rule in self.rules:
            findings = rule.check(unit)
            if findings:
                unit.errors.extend(rule.scope, findings)
        if unit.errors:
            log.info(
                "Unit %r failed validation in scopes: %s",
                unit.external_id,
                ", ".join(unit.errors.scopes),
            )
        return unit


def check_identity(unit: ImportUnit) -> dict[str, str]:
    external_id = unit.external_id
    if not isinstance(external_id, str) or not external_id.strip():
        return {"external_id": "A unique external id must be set for the import unit."}
    if external_id != external_id.strip():
        return {"external_id": "The external id must not have leading or trailing whitespace."}
    return {}


def check_body(unit: ImportUnit) -> dict[str, str]:
    errors: dict[str, str] = {}
    body = unit.body
    if unit.is_new and not (body.title and body.title.strip()):
        errors["title"] = "A title is required when creating a record."
    if body.title is not None and unit.internal_id is not None and not body.title.strip():
        errors["title"] = "The title must not be blank."
    if body.status is not None and body.status not in set(RecordStatus):
        errors["status"] = f"Unknown status {body.status!r}."
    if body.record_type is not None and not RECORD_TYPE_PATTERN.match(body.record_type):
        errors["record_type"] = f"Invalid record type {body.record_type!r}."
    if body.slug is not None and not SLUG_PATTERN.match(body.slug):
        errors["slug"] = f"Invalid slug {body.slug!r}."
    for key in body.extra:
        if not key or not isinstance(key, str):
            errors["extra"] = "Extra field names must be non-empty strings."
    return errors


def metadata_check(keys: IdentityKeys) -> RuleCheck:
    """Metadata keys must be present and must not collide with the identity index."""

    def check_metadata(unit: ImportUnit) -> dict[str, str]:
        errors: dict[str, str] = {}
        for index, entry in enumerate(unit.metadata):
            field_key = f"metadata[{index}]"
            if not isinstance(entry.key, str) or not entry.key.strip():
                errors[field_key] = "Metadata keys must be non-empty strings."
                continue
            if entry.key == keys.base_key or entry.key.startswith(keys.id_prefix):
                errors[field_key] = f"Metadata key {entry.key!r} is reserved for identity tags."
                continue
            try:
                json.dumps(entry.value)
            except (TypeError, ValueError):
                errors[field_key] = f"Metadata value for {entry.key!r} is not serialisable."
        return errors

    return check_metadata


def check_taxonomies(unit: ImportUnit) -> dict[str, str]:
    errors: dict[str, str] = {}
    for taxonomy, terms in unit.taxonomies.items():
        if not isinstance(taxonomy, str) or not TAXONOMY_PATTERN.match(taxonomy):
            errors[str(taxonomy)] = f"Invalid taxonomy name {taxonomy!r}."
            continue
        for index, term in enumerate(terms):
            field_key = f"{taxonomy}[{index}]"
            if not isinstance(term, TermRef):
                errors[field_key] = "Terms must be given as name/slug references."
                continue
            if not term.name or not term.name.strip():
                errors[field_key] = "A term name is required."
            elif not term.slug or not SLUG_PATTERN.match(term.slug):
                errors[field_key] = f"Invalid term slug {term.slug!r}."
            elif term.parent_slug is not None and term.parent_slug == term.slug:
                errors[field_key] = f"Term {term.slug!r} cannot be its own parent."
    return errors


def locale_check(languages: Sequence[str] = ()) -> RuleCheck:
    known = frozenset(languages)

    def check_locale(unit: ImportUnit) -> dict[str, str]:
        info = unit.locale
        if info is None:
            return {}
        if not isinstance(info, LocaleInfo):
            return {"locale": "Locale data is not in a recognised format."}
        errors: dict[str, str] = {}
        if not isinstance(info.locale, str) or not LOCALE_PATTERN.match(info.locale):
            errors["locale"] = f"Invalid locale code {info.locale!r}."
        elif known and info.locale not in known:
            errors["locale"] = f"Locale {info.locale!r} is not an enabled language."
        if info.master_external_id is not None and not info.has_master:
            errors["master"] = "The master id must not be blank."
        return errors

    return check_locale


def master_resolvable_check(resolver: IdentityResolver) -> RuleCheck:
    """Strict mode: a named locale master must already exist."""

    def check_master(unit: ImportUnit) -> dict[str, str]:
        info = unit.locale
        if not isinstance(info, LocaleInfo) or not info.has_master or not unit.external_id:
            return {}
        master_id = resolver.keys.strip_prefix(info.master_external_id or "")
        if resolver.resolve(master_id) is None:
            return {"master": f"Master record {master_id!r} has not been imported yet."}
        return {}

    return check_master


def default_validator(
    config: ImporterConfig,
    *,
    resolver: IdentityResolver,
) -> Validator:
    validator = Validator()
    validator.add_rule(ErrorScope.IDENTITY, check_identity, name="identity")
    validator.add_rule(ErrorScope.BODY, check_body, name="body")
    validator.add_rule(ErrorScope.METADATA, metadata_check(resolver.keys), name="metadata")
    validator.add_rule(ErrorScope.TAXONOMY, check_taxonomies, name="taxonomy")
    validator.add_rule(ErrorScope.LOCALE, locale_check(config.languages), name="locale")
    if config.strict_locale_master:
        validator.add_rule(
            ErrorScope.LOCALE, master_resolvable_check(resolver), name="locale-master"
        )
    return validator
