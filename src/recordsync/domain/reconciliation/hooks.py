"""Hook surface for collaborators that transform record bodies.

Two stages are exposed:

- field filters run on each staged body field before validation, keyed by field
  name (``title``, ``status``, or any ``extra`` key);
- write hooks run on the flat row immediately before the physical write. They are
  installed on the record store only for the duration of the importer's own
  write, so other writers never see them.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from recordsync.domain.model import RecordBody

if TYPE_CHECKING:
    from recordsync.domain.ports import WriteHook

type FieldFilter = Callable[[object], object]


@dataclass(slots=True)
class BodyHooks:
    _field_filters: dict[str, list[FieldFilter]] = field(
        default_factory=dict["str", "list[FieldFilter]"]
    )
    _write_hooks: list[WriteHook] = field(default_factory=list["WriteHook"])

    def add_field_filter(self, field_name: str, func: FieldFilter) -> None:
        self._field_filters.setdefault(field_name, []).append(func)

    def add_write_hook(self, hook: WriteHook) -> None:
        self._write_hooks.append(hook)

    def filter_body(self, body: RecordBody) -> RecordBody:
        if not self._field_filters:
            return body
        values = body.provided()
        for name, value in list(values.items()):
            for func in self._field_filters.get(name, ()):
                value = func(value)
            values[name] = value
        return RecordBody.from_fields(values)

    def pre_write(self, row: dict[str, object]) -> dict[str, object]:
        """Run every registered write hook in registration order."""

        for hook in self._write_hooks:
            row = hook(row)
        return row
