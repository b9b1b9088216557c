"""Scoped error collections.

A unit accumulates errors per scope so that one failing check never erases the
findings of another. Keys inside a scope are field keys (``title``,
``metadata[2]``, ``category[0]``); a later message for the same key
replaces the earlier one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import ErrorScope

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


@dataclass(slots=True)
class ScopedErrors:
    _errors: dict[ErrorScope, dict[str, str]] = field(
        default_factory=dict["ErrorScope", "dict[str, str]"], repr=False
    )

    def add(self, scope: ErrorScope, key: str, message: str) -> None:
        self._errors.setdefault(scope, {})[key] = message

    def extend(self, scope: ErrorScope, errors: Mapping[str, str]) -> None:
        for key, message in errors.items():
            self.add(scope, key, message)

    def for_scope(self, scope: ErrorScope) -> dict[str, str]:
        return dict(self._errors.get(scope, {}))

    def has_scope(self, scope: ErrorScope) -> bool:
        return bool(self._errors.get(scope))

    @property
    def scopes(self) -> tuple[ErrorScope, ...]:
        return tuple(scope for scope, errors in self._errors.items() if errors)

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {str(scope): dict(errors) for scope, errors in self._errors.items() if errors}

    def __bool__(self) -> bool:
        return any(self._errors.values())

    def __len__(self) -> int:
        return sum(len(errors) for errors in self._errors.values())

    def __iter__(self) -> Iterator[tuple[ErrorScope, str, str]]:
        for scope, errors in self._errors.items():
            for key, message in errors.items():
                yield scope, key, message
