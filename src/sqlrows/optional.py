"""
Map builders that treat NULL as "absent": columns whose value is NULL are
left out of the record instead of being stored as None.

    >>> execute(cn, 'select id, nickname from person', builder_fn=optional.as_maps)
    [Record({'id': 1}), Record({'id': 2, 'nickname': 'Bob'})]

Row views built on these builders still answer None for a NULL column.
"""
from typing import Any

from sqlrows.builders import MapRowBuilder, reader_from, require_options
from sqlrows.cursor import CursorAdapter
from sqlrows.naming import LOWER, QUALIFIED, UNQUALIFIED, UNQUALIFIED_LOWER
from sqlrows.naming import modified, unqualified_modified
from sqlrows.types import Record

__all__ = [
    'OptionalMapRowBuilder',
    'as_maps',
    'as_unqualified_maps',
    'as_modified_maps',
    'as_unqualified_modified_maps',
    'as_lower_maps',
    'as_unqualified_lower_maps',
]


class OptionalMapRowBuilder:
    """Wraps a map builder, dropping NULL columns from each record."""
    shape = 'map'

    def __init__(self, builder: MapRowBuilder) -> None:
        self.builder = builder
        self.adapter = builder.adapter
        self.column_names = builder.column_names

    def new_row(self) -> dict:
        return {}

    def column_count(self) -> int:
        return self.builder.column_count()

    def with_column(self, row: dict, i: int) -> dict:
        value = self.builder.read_column(i)
        if value is not None:
            row[self.column_names[i]] = value
        return row

    def finalize_row(self, row: dict) -> Record:
        return Record(row)

    def column_index(self, name: str) -> int | None:
        return self.builder.column_index(name)

    def read_column(self, i: int) -> Any:
        return self.builder.read_column(i)


def as_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    return OptionalMapRowBuilder(MapRowBuilder(adapter, QUALIFIED, reader_from(opts)))


def as_unqualified_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    return OptionalMapRowBuilder(MapRowBuilder(adapter, UNQUALIFIED, reader_from(opts)))


def as_modified_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    require_options(opts, 'qualifier_fn', 'label_fn')
    naming = modified(opts.qualifier_fn, opts.label_fn)
    return OptionalMapRowBuilder(MapRowBuilder(adapter, naming, reader_from(opts)))


def as_unqualified_modified_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    require_options(opts, 'label_fn')
    naming = unqualified_modified(opts.label_fn)
    return OptionalMapRowBuilder(MapRowBuilder(adapter, naming, reader_from(opts)))


def as_lower_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    return OptionalMapRowBuilder(MapRowBuilder(adapter, LOWER, reader_from(opts)))


def as_unqualified_lower_maps(adapter: CursorAdapter, opts: Any = None) -> OptionalMapRowBuilder:
    return OptionalMapRowBuilder(MapRowBuilder(adapter, UNQUALIFIED_LOWER, reader_from(opts)))
