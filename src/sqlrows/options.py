import dataclasses
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from sqlrows.builders import as_list, as_maps
from sqlrows.exceptions import MalformedStatementSpec
from sqlrows.readers import default_reader

from libb import ConfigOptions

__all__ = [
    'Options',
    'as_options',
    'pagination_dialect',
]


def pagination_dialect(top: int | None = None, limit: int | None = None,
                       offset: int | None = None, fetch: int | None = None) -> str | None:
    """Name the single pagination dialect implied by the options.

    - ``top``: row-limiting prefix (``SELECT TOP ? ...``)
    - ``limit`` with optional ``offset``: ``LIMIT ? OFFSET ?`` suffix
    - ``offset`` and/or ``fetch``: ANSI ``OFFSET ? ROWS FETCH NEXT ? ROWS ONLY``

    Raises MalformedStatementSpec when options from different dialects are
    combined.
    """
    if top is not None:
        if limit is not None or offset is not None or fetch is not None:
            raise MalformedStatementSpec('top cannot be combined with limit, offset or fetch')
        return 'top'
    if limit is not None:
        if fetch is not None:
            raise MalformedStatementSpec('limit cannot be combined with fetch; use offset/fetch')
        return 'limit'
    if offset is not None or fetch is not None:
        return 'fetch'
    return None


@dataclass
class Options(ConfigOptions):
    """Options

    Result building:
    - builder_fn: ``(adapter, opts) -> RowBuilder`` (default: `as_maps`)
    - result_set_fn: ``(row_builder, opts) -> ResultSetBuilder`` (default: `as_list`)
    - reader: column reader ``(raw, descriptor) -> value``
    - label_fn / qualifier_fn: casing for the modified builders
    - table_name: qualifier for columns when the driver does not report one
    - fetch_size: rows pulled from the driver per fetchmany() call

    Statement building:
    - table_fn / column_fn: transforms applied to table / column identifiers
    - columns: projection; names, (name, alias) or (Raw(expr), alias)
    - order_by: names or (name, 'asc' | 'desc')
    - top, or limit/offset, or offset/fetch: pagination (one dialect per call)
    - suffix: text appended verbatim to the statement
    - batch: multi-row insert emits one value group, params grouped per row

    Navigation:
    - schema: column -> (table, key) or (table, key, 'many'); see `navigate`
    """
    builder_fn: Callable[..., Any] | None = None
    result_set_fn: Callable[..., Any] | None = None
    reader: Callable[..., Any] | None = None
    label_fn: Callable[[str], str] | None = None
    qualifier_fn: Callable[[str], str] | None = None
    table_name: str | None = None
    fetch_size: int = 500
    table_fn: Callable[[str], str] | None = None
    column_fn: Callable[[str], str] | None = None
    columns: Sequence[Any] | None = None
    order_by: Sequence[Any] | None = None
    top: int | None = None
    limit: int | None = None
    offset: int | None = None
    fetch: int | None = None
    suffix: str | None = None
    batch: bool = False
    schema: Mapping[str, Sequence[str]] | None = None

    def __post_init__(self):
        if self.builder_fn is None:
            self.builder_fn = as_maps
        if self.result_set_fn is None:
            self.result_set_fn = as_list
        if self.reader is None:
            self.reader = default_reader
        if self.fetch_size < 1:
            raise ValueError('fetch_size must be positive')
        pagination_dialect(self.top, self.limit, self.offset, self.fetch)

    @property
    def pagination(self) -> str | None:
        return pagination_dialect(self.top, self.limit, self.offset, self.fetch)


def as_options(opts: Options | Mapping[str, Any] | None = None, **kw: Any) -> Options:
    """Coerce an Options object, a dict or None, plus keyword overrides.

    >>> as_options({'limit': 10}, offset=5).pagination
    'limit'
    """
    if isinstance(opts, Options):
        return dataclasses.replace(opts, **kw) if kw else opts
    merged = {**(opts or {}), **kw}
    unknown = set(merged) - {f.name for f in dataclasses.fields(Options)}
    if unknown:
        raise TypeError(f'unknown options: {sorted(unknown)}')
    return Options(**merged)
