"""Reconciliation core: map external import units onto content-store records.

Stages, leaves first:
1) identity resolution (external id -> internal id)
2) validation into scoped errors
3) taxonomy term find-or-create and attachment
4) create-or-update of body, identity tags and metadata
5) locale marking and translation-group linking
"""

from __future__ import annotations

from .engine import ImportReconciler, build_reconciler
from .hooks import BodyHooks, FieldFilter
from .identity import IdentityKeys, IdentityResolver
from .locale import LocaleLinkManager, merge_translation_group, select_locale_collaborator
from .taxonomy import TaxonomyResolver
from .upsert import UpsertEngine
from .validation import ValidationRule, Validator, default_validator

__all__ = [
    "BodyHooks",
    "FieldFilter",
    "IdentityKeys",
    "IdentityResolver",
    "ImportReconciler",
    "LocaleLinkManager",
    "TaxonomyResolver",
    "UpsertEngine",
    "ValidationRule",
    "Validator",
    "build_reconciler",
    "default_validator",
    "merge_translation_group",
    "select_locale_collaborator",
]
