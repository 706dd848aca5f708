"""
Lazy row views over the cursor's current row.

A `RowView` is what `plan()` hands to a reducing function. Looking up a
column reads that one value straight from the cursor (through the column
reader); nothing else is converted and nothing is cached per key. Structural
operations (iteration, ``keys()``/``values()``/``items()``, equality) build
the whole row once with the active row builder and reuse that from then on.

A view is only valid while the cursor stays on its row. Any access after the
cursor advances raises `StaleRowError`; call ``to_concrete()`` to keep a row.
"""
from collections.abc import Iterator
from typing import Any

from sqlrows.builders import RowBuilder, build_row
from sqlrows.cursor import Position

__all__ = ['RowView']

_MISSING = object()


class RowView:
    """Cursor-backed view of one row."""

    __slots__ = ('builder', 'position', '_concrete')

    def __init__(self, builder: RowBuilder, position: Position | None = None) -> None:
        self.builder = builder
        self.position = position or builder.adapter.position
        self._concrete = _MISSING

    def _check(self) -> None:
        self.position.check()

    def _resolve(self, key: str) -> Any:
        i = self.builder.column_index(key)
        if i is None:
            i = self.builder.adapter.label_index(key)
        if i is None:
            return _MISSING
        return self.builder.read_column(i)

    def get(self, key: str, default: Any = None) -> Any:
        """Value of one column, by exposed name or raw label."""
        self._check()
        value = self._resolve(key)
        return default if value is _MISSING else value

    def __getitem__(self, key: str) -> Any:
        self._check()
        value = self._resolve(key)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        self._check()
        if not isinstance(key, str):
            return False
        return (self.builder.column_index(key) is not None
                or self.builder.adapter.label_index(key) is not None)

    def get_by_index(self, i: int) -> Any:
        self._check()
        return self.builder.read_column(i)

    def column_count(self) -> int:
        self._check()
        return self.builder.column_count()

    __len__ = column_count

    def to_concrete(self) -> Any:
        """The fully built row (Record or tuple); built at most once."""
        self._check()
        if self._concrete is _MISSING:
            self._concrete = build_row(self.builder)
        return self._concrete

    def keys(self) -> list[str]:
        row = self.to_concrete()
        if self.builder.shape == 'array':
            return list(self.builder.column_names)
        return list(row)

    def values(self) -> list[Any]:
        row = self.to_concrete()
        if self.builder.shape == 'array':
            return list(row)
        return list(row.values())

    def items(self) -> list[tuple[str, Any]]:
        row = self.to_concrete()
        if self.builder.shape == 'array':
            return list(zip(self.builder.column_names, row))
        return list(row.items())

    def __iter__(self) -> Iterator:
        return iter(self.to_concrete())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RowView):
            other = other.to_concrete()
        return self.to_concrete() == other

    __hash__ = None

    def __repr__(self) -> str:
        state = 'valid' if self.position.valid else 'stale'
        return f'<RowView {state} at {self.position.token}>'
