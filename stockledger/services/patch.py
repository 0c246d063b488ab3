"""Partial-update patches.

A ``Patch`` is a validated mapping of column name to new value. It renders a
single ``UPDATE ... SET`` for whichever fields are present, so supporting a new
editable column only means listing it in ``allowed``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from sqlalchemy import update

from ..errors import ImmutableFieldError, ValidationError


@dataclass(frozen=True)
class Patch:
    values: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_changes(
        cls,
        changes: Optional[Mapping[str, Any]],
        *,
        allowed: Iterable[str],
        immutable: Iterable[str] = (),
        ignore_unknown: bool = False,
        coercers: Optional[Mapping[str, Callable[[Any], Any]]] = None,
    ) -> "Patch":
        if changes is None:
            return cls()
        if not isinstance(changes, Mapping):
            raise ValidationError("changes must be an object of field names to new values")

        allowed = set(allowed)
        blocked = set(immutable) & set(changes)
        if blocked:
            raise ImmutableFieldError(blocked)

        unknown = set(changes) - allowed
        if unknown and not ignore_unknown:
            raise ValidationError(f"Unknown or read-only fields: {', '.join(sorted(unknown))}")

        coercers = coercers or {}
        values = {}
        for name, value in changes.items():
            if name not in allowed:
                continue
            coerce = coercers.get(name)
            values[name] = coerce(value) if coerce else value
        return cls(values)

    def __bool__(self) -> bool:
        return bool(self.values)

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def statement(self, model, row_id: int, *, always: Optional[Mapping[str, Any]] = None):
        """Build ``UPDATE <model> SET ... WHERE id = row_id`` for this patch."""
        assignments = dict(self.values)
        if always:
            assignments.update(always)
        if not assignments:
            raise ValueError("Patch has nothing to update")
        return update(model).where(model.id == row_id).values(**assignments)
