"""
Column readers: the hook that converts a raw driver value into the value a
row exposes.

A reader is any callable ``(raw, descriptor) -> value``. `ColumnReader`
bundles a fallback reader with per-type and per-label overrides so custom
conversion is attached at the call site (``opts.reader``) instead of being
registered globally.

Large objects
-------------
`as_large_object` wraps binary values in a `LargeObject`. The builder binds
the handle to the cursor position it was read at, and reading it after the
cursor has advanced raises `StaleRowError`: such handles are only valid
while their row is current, so copy the bytes out (or materialize with a
plain reader) before moving on.
"""
import datetime
import io
from collections.abc import Callable, Mapping
from typing import Any

import dateutil.parser
import numpy as np
from sqlrows.types import ColumnDescriptor

Reader = Callable[[Any, ColumnDescriptor], Any]

TRUE_STRINGS = {'t', 'true', 'y', 'yes', '1'}
FALSE_STRINGS = {'f', 'false', 'n', 'no', '0'}

__all__ = [
    'ColumnReader',
    'LargeObject',
    'read_column',
    'as_large_object',
    'parse_datetime',
    'parse_date',
    'read_as_instant',
    'read_as_local',
    'read_as_default',
    'default_reader',
]


def _as_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        return value
    if isinstance(value, int | np.integer) and value in {0, 1}:
        return bool(value)
    return value


def read_column(value: Any, descriptor: ColumnDescriptor) -> Any:
    """Default reader: pass values through, normalizing boolean-like values.

    Drivers are not trusted to return canonical booleans, so `numpy.bool_`
    and the integer or string truth values of boolean-typed columns all come
    back as `True` / `False`.
    """
    if value is None:
        return None
    if isinstance(value, bool | np.bool_):
        return bool(value)
    if descriptor.python_type is bool:
        return _as_bool(value)
    return value


class ColumnReader:
    """Reader with per-label and per-type overrides.

    Lookup order: ``by_label[descriptor.label]``, then the first
    ``by_type`` entry matching the value, then ``fn``. NULL is never passed
    to any of them.
    """

    def __init__(self, fn: Reader = read_column,
                 by_type: Mapping[type, Reader] | None = None,
                 by_label: Mapping[str, Reader] | None = None) -> None:
        self.fn = fn
        self.by_type = dict(by_type or {})
        self.by_label = dict(by_label or {})

    def __call__(self, value: Any, descriptor: ColumnDescriptor) -> Any:
        if value is None:
            return None
        reader = self.by_label.get(descriptor.label)
        if reader is not None:
            return reader(value, descriptor)
        for typ, reader in self.by_type.items():
            if isinstance(value, typ):
                return reader(value, descriptor)
        return self.fn(value, descriptor)

    def with_type(self, typ: type, reader: Reader) -> 'ColumnReader':
        return ColumnReader(self.fn, {**self.by_type, typ: reader}, self.by_label)

    def with_label(self, label: str, reader: Reader) -> 'ColumnReader':
        return ColumnReader(self.fn, self.by_type, {**self.by_label, label: reader})

    def __repr__(self) -> str:
        return (f'ColumnReader(fn={getattr(self.fn, "__name__", self.fn)}, '
                f'by_type={list(self.by_type)}, by_label={list(self.by_label)})')


default_reader = ColumnReader()


# Large objects

class LargeObject:
    """Cursor-bound handle over a binary column value."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._stream = io.BytesIO(bytes(data))
        self._size = len(data)
        self.position = None

    def bind(self, position: Any) -> None:
        self.position = position

    def _check(self) -> None:
        if self.position is not None:
            self.position.check()

    def read(self, size: int = -1) -> bytes:
        self._check()
        return self._stream.read(size)

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f'<LargeObject {self._size} bytes>'


def as_large_object(value: Any, descriptor: ColumnDescriptor) -> LargeObject:
    return LargeObject(value)


# Date and time readers

def parse_datetime(value: Any, descriptor: ColumnDescriptor) -> Any:
    """Read ISO 8601 text (as SQLite stores it) as a datetime."""
    if isinstance(value, bytes):
        value = value.decode()
    if isinstance(value, str):
        return dateutil.parser.isoparse(value)
    return value


def parse_date(value: Any, descriptor: ColumnDescriptor) -> Any:
    """Read ISO 8601 text as a date."""
    value = parse_datetime(value, descriptor)
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def _to_instant(value: datetime.datetime, descriptor: ColumnDescriptor) -> datetime.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


def _to_local(value: datetime.datetime, descriptor: ColumnDescriptor) -> datetime.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def read_as_instant(reader: ColumnReader = default_reader) -> ColumnReader:
    """Timestamps come back timezone-aware in UTC (naive values are taken as UTC).

    Dates stay dates: they carry no time component to anchor.
    """
    return reader.with_type(datetime.datetime, _to_instant)


def read_as_local(reader: ColumnReader = default_reader) -> ColumnReader:
    """Timestamps come back as naive datetimes in local time."""
    return reader.with_type(datetime.datetime, _to_local)


def read_as_default(reader: ColumnReader = default_reader) -> ColumnReader:
    """Undo `read_as_instant` / `read_as_local`: timestamps come back as-is."""
    by_type = {k: v for k, v in reader.by_type.items() if k is not datetime.datetime}
    return ColumnReader(reader.fn, by_type, reader.by_label)
