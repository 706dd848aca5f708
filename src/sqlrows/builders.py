"""
Row and result-set builder strategies.

A row builder turns the cursor's current row into a concrete row; a
result-set builder collects concrete rows into the final result. Both are
plain objects chosen per call through `Options`:

    execute(cn, sql, builder_fn=as_unqualified_lower_maps)
    execute(cn, sql, builder_fn=as_arrays, result_set_fn=as_dataframe)

Builder factories take ``(adapter, opts)`` and are called once per
statement, after execution, so column names are computed once per statement.

Map-shaped rows are `Record` objects keyed by column name. Array-shaped rows
are tuples, with the names kept on the builder (``column_names``); arrays
skip per-row key hashing, which pays off for wide results scanned often.
"""
from collections.abc import Callable
from typing import Any, Protocol

from sqlrows.cursor import CursorAdapter
from sqlrows.naming import LOWER, QUALIFIED, UNQUALIFIED, UNQUALIFIED_LOWER
from sqlrows.naming import NamingPolicy, modified, unqualified_modified
from sqlrows.readers import LargeObject, default_reader
from sqlrows.types import ArrayResult, Record

__all__ = [
    'RowBuilder',
    'ResultSetBuilder',
    'MapRowBuilder',
    'ArrayRowBuilder',
    'ListResultSetBuilder',
    'build_row',
    'as_maps',
    'as_unqualified_maps',
    'as_modified_maps',
    'as_unqualified_modified_maps',
    'as_lower_maps',
    'as_unqualified_lower_maps',
    'as_arrays',
    'as_unqualified_arrays',
    'as_modified_arrays',
    'as_unqualified_modified_arrays',
    'as_lower_arrays',
    'as_unqualified_lower_arrays',
    'as_list',
]


class RowBuilder(Protocol):
    """Builds one concrete row from the cursor's current position."""
    adapter: CursorAdapter
    column_names: list[str]
    shape: str

    def new_row(self) -> Any: ...

    def column_count(self) -> int: ...

    def with_column(self, row: Any, i: int) -> Any: ...

    def finalize_row(self, row: Any) -> Any: ...

    def column_index(self, name: str) -> int | None: ...

    def read_column(self, i: int) -> Any: ...


class ResultSetBuilder(Protocol):
    """Accumulates concrete rows into a result set."""

    def new_result_set(self) -> Any: ...

    def add_row(self, rs: Any, row: Any) -> Any: ...

    def finalize(self, rs: Any) -> Any: ...


def read_value(adapter: CursorAdapter, reader: Callable, i: int) -> Any:
    """Read column `i` of the current row through the column reader."""
    value = reader(adapter.value_by_index(i), adapter.descriptor(i))
    if isinstance(value, LargeObject):
        value.bind(adapter.position)
    return value


def build_row(builder: RowBuilder) -> Any:
    """Materialize the current row with the given builder."""
    row = builder.new_row()
    for i in range(builder.column_count()):
        row = builder.with_column(row, i)
    return builder.finalize_row(row)


class MapRowBuilder:
    """Builds `Record` rows keyed by the naming policy's column names."""
    shape = 'map'

    def __init__(self, adapter: CursorAdapter, naming: NamingPolicy,
                 reader: Callable = default_reader) -> None:
        self.adapter = adapter
        self.naming = naming
        self.reader = reader
        self.column_names = naming.names(adapter.descriptors())
        self._index = {name: i for i, name in enumerate(self.column_names)}

    def new_row(self) -> dict:
        return {}

    def column_count(self) -> int:
        return len(self.column_names)

    def with_column(self, row: dict, i: int) -> dict:
        row[self.column_names[i]] = self.read_column(i)
        return row

    def finalize_row(self, row: dict) -> Record:
        return Record(row)

    def column_index(self, name: str) -> int | None:
        return self._index.get(name)

    def read_column(self, i: int) -> Any:
        return read_value(self.adapter, self.reader, i)


class ArrayRowBuilder:
    """Builds tuple rows; names are exposed once as ``column_names``."""
    shape = 'array'

    def __init__(self, adapter: CursorAdapter, naming: NamingPolicy,
                 reader: Callable = default_reader) -> None:
        self.adapter = adapter
        self.naming = naming
        self.reader = reader
        self.column_names = naming.names(adapter.descriptors())
        self._index = {name: i for i, name in enumerate(self.column_names)}

    def new_row(self) -> list:
        return []

    def column_count(self) -> int:
        return len(self.column_names)

    def with_column(self, row: list, i: int) -> list:
        row.append(self.read_column(i))
        return row

    def finalize_row(self, row: list) -> tuple:
        return tuple(row)

    def column_index(self, name: str) -> int | None:
        return self._index.get(name)

    def read_column(self, i: int) -> Any:
        return read_value(self.adapter, self.reader, i)


def reader_from(opts: Any) -> Callable:
    return getattr(opts, 'reader', None) or default_reader


def require_options(opts: Any, *names: str) -> None:
    for name in names:
        if getattr(opts, name, None) is None:
            raise ValueError(f'{name} is required for this builder')


# Map builders

def as_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    """Records keyed by ``table/label`` (just ``label`` when the table is unknown)."""
    return MapRowBuilder(adapter, QUALIFIED, reader_from(opts))


def as_unqualified_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    """Records keyed by bare column labels."""
    return MapRowBuilder(adapter, UNQUALIFIED, reader_from(opts))


def as_modified_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    """Records with qualified keys cased by `qualifier_fn` and `label_fn`."""
    require_options(opts, 'qualifier_fn', 'label_fn')
    return MapRowBuilder(adapter, modified(opts.qualifier_fn, opts.label_fn), reader_from(opts))


def as_unqualified_modified_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    """Records with bare keys cased by `label_fn`."""
    require_options(opts, 'label_fn')
    return MapRowBuilder(adapter, unqualified_modified(opts.label_fn), reader_from(opts))


def as_lower_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    return MapRowBuilder(adapter, LOWER, reader_from(opts))


def as_unqualified_lower_maps(adapter: CursorAdapter, opts: Any = None) -> MapRowBuilder:
    return MapRowBuilder(adapter, UNQUALIFIED_LOWER, reader_from(opts))


# Array builders

def as_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    return ArrayRowBuilder(adapter, QUALIFIED, reader_from(opts))


def as_unqualified_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    return ArrayRowBuilder(adapter, UNQUALIFIED, reader_from(opts))


def as_modified_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    require_options(opts, 'qualifier_fn', 'label_fn')
    return ArrayRowBuilder(adapter, modified(opts.qualifier_fn, opts.label_fn), reader_from(opts))


def as_unqualified_modified_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    require_options(opts, 'label_fn')
    return ArrayRowBuilder(adapter, unqualified_modified(opts.label_fn), reader_from(opts))


def as_lower_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    return ArrayRowBuilder(adapter, LOWER, reader_from(opts))


def as_unqualified_lower_arrays(adapter: CursorAdapter, opts: Any = None) -> ArrayRowBuilder:
    return ArrayRowBuilder(adapter, UNQUALIFIED_LOWER, reader_from(opts))


# Result set builders

class ListResultSetBuilder:
    """Collects rows into a list; array rows come back as an `ArrayResult`."""

    def __init__(self, row_builder: RowBuilder) -> None:
        self.row_builder = row_builder

    def new_result_set(self) -> list:
        return []

    def add_row(self, rs: list, row: Any) -> list:
        rs.append(row)
        return rs

    def finalize(self, rs: list) -> list | ArrayResult:
        if self.row_builder.shape == 'array':
            return ArrayResult(tuple(self.row_builder.column_names), rs)
        return rs


def as_list(row_builder: RowBuilder, opts: Any = None) -> ListResultSetBuilder:
    return ListResultSetBuilder(row_builder)
