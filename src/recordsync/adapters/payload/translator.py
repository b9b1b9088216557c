"""Translate import payloads into staged import units."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from recordsync.domain.model import ImportUnit, LocaleInfo, RecordBody, TermRef

from .schema import ImportPayload

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


log = getLogger(__name__)


class PayloadError(ValueError):
    """Raised when a payload cannot be parsed into an import unit."""

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        prefix = f"line {line}: " if line is not None else ""
        super().__init__(f"{prefix}{message}")


def parse_import_unit(payload: ImportPayload) -> ImportUnit:
    """Stage an import unit from a parsed payload."""

    unit = ImportUnit(
        external_id=payload.id,
        body=RecordBody.from_fields(payload.body.flat_fields()),
    )
    for entry in payload.meta:
        unit.add_meta(entry.key, entry.value)
    for taxonomy, terms in payload.taxonomies.items():
        unit.add_terms(
            taxonomy,
            *(
                TermRef(
                    name=term.name,
                    slug=term.slug,
                    parent_slug=term.parent,
                    description=term.description,
                )
                for term in terms
            ),
        )
    if payload.locale is not None:
        master = payload.locale.master
        unit.locale = LocaleInfo(
            locale=payload.locale.locale,
            master_external_id=master.reference if master is not None else None,
        )
    return unit


def unit_from_mapping(data: Mapping[str, object]) -> ImportUnit:
    try:
        payload = ImportPayload.model_validate(data)
    except ValidationError as exc:
        raise PayloadError(str(exc)) from exc
    return parse_import_unit(payload)


def read_json_lines(lines: Iterable[str]) -> Iterator[ImportUnit | PayloadError]:
    """Yield one staged unit per non-blank line.

    Unparseable lines are yielded as :class:`PayloadError` instances so a
    batch can carry on past them.
    """

    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            payload = ImportPayload.model_validate_json(line)
        except ValidationError as exc:
            log.warning("Skipping malformed payload on line %d: %s", number, exc)
            yield PayloadError(str(exc), line=number)
            continue
        yield parse_import_unit(payload)
