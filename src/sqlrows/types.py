"""
Column metadata and concrete row types.

This module provides:
- resolve_type: Resolve driver type codes to Python types
- ColumnDescriptor: Per-column metadata derived from a cursor description
- Record: Immutable, ordered, attribute-accessible row mapping
- ArrayResult: Array-shaped result set (column names held beside the rows)
"""
import datetime
import decimal
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple, Self

from psycopg.postgres import types as pg_types

UPDATE_COUNT = 'update_count'


# Type Resolution - Database type codes -> Python types

_oid = lambda x: pg_types.get(x).oid

postgres_types: dict[int, type] = {}

for v in [_oid('bpchar'), _oid('name'), _oid('text'), _oid('uuid'), _oid('varchar'),
          _oid('json')]:
    postgres_types[v] = str

for v in [_oid('int2'), _oid('int4'), _oid('int8')]:
    postgres_types[v] = int

for v in [_oid('float4'), _oid('float8')]:
    postgres_types[v] = float

postgres_types[_oid('numeric')] = decimal.Decimal
postgres_types[_oid('date')] = datetime.date
postgres_types[_oid('time')] = datetime.time
postgres_types[_oid('timetz')] = datetime.time

for v in [_oid('timestamp'), _oid('timestamptz')]:
    postgres_types[v] = datetime.datetime

postgres_types[_oid('bool')] = bool

for v in [_oid('bytea'), _oid('jsonb')]:
    postgres_types[v] = bytes


def resolve_type(dialect: str | None, type_code: Any) -> type | None:
    """Resolve a driver type code to a Python type.

    Returns None when the driver does not report a usable type code, which is
    always the case for `sqlite3` result descriptions. SQLite values are read
    as stored, so a BOOLEAN column yields 0 and 1 unless a reader maps it.
    """
    if type_code is None:
        return None

    if isinstance(type_code, type):
        return type_code

    if dialect == 'postgresql':
        return postgres_types.get(type_code)

    return None


# Column Descriptor - Metadata from cursor descriptions

@dataclass(frozen=True, slots=True)
class ColumnDescriptor:
    """Immutable metadata for one result column.

    `qualifier` is the source table name, or the empty string when it is
    not known. It is never None.
    """
    index: int
    label: str
    qualifier: str = ''
    type_code: Any = None
    python_type: type | None = None

    @classmethod
    def from_cursor_description(cls, index: int, description_item: Any,
                                dialect: str | None = None,
                                table_name: str | None = None) -> Self:
        """Create a descriptor from one item of ``cursor.description``.

        psycopg yields `Column` objects with attributes, other drivers yield
        plain 7-tuples.
        """
        if hasattr(description_item, 'name'):
            label = description_item.name
            type_code = getattr(description_item, 'type_code', None)
        else:
            label = description_item[0]
            type_code = description_item[1] if len(description_item) > 1 else None

        qualifier = getattr(description_item, 'table_name', None) or table_name or ''

        return cls(
            index=index,
            label=str(label),
            qualifier=str(qualifier),
            type_code=type_code,
            python_type=resolve_type(dialect, type_code),
        )


def descriptors_from_cursor(cursor: Any, dialect: str | None = None,
                            table_name: str | None = None) -> tuple[ColumnDescriptor, ...]:
    """Create ColumnDescriptor objects from a cursor description."""
    if cursor.description is None:
        return ()
    return tuple(ColumnDescriptor.from_cursor_description(i, desc, dialect, table_name)
                 for i, desc in enumerate(cursor.description))


# Concrete rows

class Record(Mapping):
    """Immutable ordered mapping of column name to value.

    Values are reachable by key and, for names that are valid identifiers,
    as attributes:

    >>> r = Record({'id': 1, 'person/name': 'Sean'})
    >>> r.id, r['person/name']
    (1, 'Sean')
    >>> r['id'] = 2
    Traceback (most recent call last):
    ...
    TypeError: 'Record' object does not support item assignment
    """

    __slots__ = ('_data',)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        object.__setattr__(self, '_data', dict(*args, **kwargs))

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise TypeError(f'{type(self).__name__} is immutable')

    def __reduce__(self):
        return (type(self), (self._data,))

    def __repr__(self) -> str:
        return f'Record({self._data!r})'

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class ArrayResult(NamedTuple):
    """Array-shaped result set: one name tuple, many value tuples."""
    columns: tuple[str, ...]
    rows: list[tuple]


def update_count_record(count: int) -> Record:
    """Synthetic record returned for statements that produce no rows."""
    return Record({UPDATE_COUNT: count})
