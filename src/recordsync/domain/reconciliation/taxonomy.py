"""Find-or-create taxonomy terms and attach them to a record.

Terms are processed in input order, so a parent created earlier in the same call
is found by a later child. Attachment is not transactional across terms: each
term reports its own outcome and nothing is rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from recordsync.domain.model import StoreError, TermAttachResult, TermConflictError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recordsync.domain.model import RecordId, Term, TermRef
    from recordsync.domain.ports import TaxonomyStore

log = getLogger(__name__)


@dataclass(slots=True)
class TaxonomyResolver:
    store: TaxonomyStore
    strict_parents: bool = False

    def resolve_and_attach(
        self,
        record_id: RecordId,
        taxonomy: str,
        terms: Sequence[TermRef],
    ) -> list[TermAttachResult]:
        results: list[TermAttachResult] = []
        for term_ref in terms:
            results.append(self._resolve_one(record_id, taxonomy, term_ref))
        return results

    def _resolve_one(
        self,
        record_id: RecordId,
        taxonomy: str,
        term_ref: TermRef,
    ) -> TermAttachResult:
        created = False
        try:
            term = self.store.find_term(taxonomy, term_ref.slug)
            if term is None:
                term, created = self._create(taxonomy, term_ref)
            term_id = _term_id(term)
        except _TermUnavailableError as exc:
            log.warning("Skipping term %s/%s: %s", taxonomy, term_ref.slug, exc)
            return TermAttachResult(taxonomy=taxonomy, term=term_ref, error=str(exc))
        except StoreError as exc:
            log.warning("Term lookup failed for %s/%s: %s", taxonomy, term_ref.slug, exc)
            return TermAttachResult(
                taxonomy=taxonomy,
                term=term_ref,
                error="An error occurred creating the taxonomy term.",
            )

        try:
            attached = self.store.attach_term(record_id, term_id, taxonomy)
        except StoreError as exc:
            log.warning("Attaching term %s/%s failed: %s", taxonomy, term_ref.slug, exc)
            return TermAttachResult(
                taxonomy=taxonomy,
                term=term_ref,
                term_id=term_id,
                created=created,
                error="An error occurred attaching the taxonomy term.",
            )
        return TermAttachResult(
            taxonomy=taxonomy,
            term=term_ref,
            term_id=term_id,
            created=created,
            attached=attached,
            error=None if attached else "The taxonomy term could not be attached.",
        )

    def _create(self, taxonomy: str, term_ref: TermRef) -> tuple[Term, bool]:
        parent_id = self._parent_id(taxonomy, term_ref)
        try:
            term = self.store.create_term(
                taxonomy,
                name=term_ref.name,
                slug=term_ref.slug,
                parent_id=parent_id,
                description=term_ref.description,
            )
        except TermConflictError:
            # Created concurrently by another writer: the slug exists now.
            existing = self.store.find_term(taxonomy, term_ref.slug)
            if existing is None:
                raise
            log.debug("Term %s/%s appeared concurrently; reusing it", taxonomy, term_ref.slug)
            return existing, False
        log.info("Created term %s/%s (id=%s)", taxonomy, term.slug, term.id)
        return term, True

    def _parent_id(self, taxonomy: str, term_ref: TermRef) -> int | None:
        if not term_ref.parent_slug:
            return None
        parent = self.store.find_term(taxonomy, term_ref.parent_slug)
        if parent is not None:
            return parent.id
        if self.strict_parents:
            raise _TermUnavailableError(
                f"Parent term {term_ref.parent_slug!r} does not exist in {taxonomy!r}."
            )
        log.debug(
            "Parent %s/%s not found; creating %s as a root term",
            taxonomy,
            term_ref.parent_slug,
            term_ref.slug,
        )
        return None


class _TermUnavailableError(StoreError):
    """The term cannot be created under the active policy."""


def _term_id(term: Term) -> int:
    if term.id is None:
        raise StoreError(f"Taxonomy store returned term {term.slug!r} without an id")
    return term.id
