"""
SQL statement building.

Each ``for_*`` function turns a table name plus a structured description of
the statement into a `CompiledStatement`: SQL text with ``?`` placeholders
and the parameters in placeholder order.

>>> for_query('user', {'id': 9, 'opt': None})
CompiledStatement(sql='SELECT * FROM user WHERE id = ? AND opt IS NULL', params=[9])
>>> for_update('user', {'status': 42}, ('id = ?', 9))
CompiledStatement(sql='UPDATE user SET status = ? WHERE id = ?', params=[42, 9])

Where clauses are either a mapping of column to value (AND-ed equality tests,
``None`` becomes ``IS NULL``) or a sequence of raw clause text followed by its
parameters. `for_query` also accepts `ALL`.

Every table, column and alias name is checked for statement separators
before any text is produced (`UnsafeIdentifierError`). Expressions wrapped in
`Raw` and the ``suffix`` option are trusted verbatim: the caller is
responsible for them.
"""
import logging
from collections.abc import Mapping, Sequence, Sized
from dataclasses import dataclass
from typing import Any, NamedTuple

from sqlrows.exceptions import MalformedStatementSpec, UnsafeIdentifierError
from sqlrows.options import Options, as_options

from libb import issequence

logger = logging.getLogger(__name__)

__all__ = [
    'ALL',
    'Raw',
    'CompiledStatement',
    'safe_name',
    'as_placeholders',
    'as_cols',
    'as_keys',
    'by_keys',
    'for_order_col',
    'for_order',
    'for_insert',
    'for_insert_multi',
    'for_update',
    'for_delete',
    'for_query',
]

SUSPICIOUS_CHARACTERS = (';',)

DIRECTIONS = {'asc': 'ASC', 'desc': 'DESC'}


class _All:
    """Select every row (no WHERE clause)."""

    def __repr__(self) -> str:
        return 'ALL'


ALL = _All()


@dataclass(frozen=True, slots=True)
class Raw:
    """SQL expression used as-is in a projection, e.g. ``(Raw('count(*)'), 'total')``."""
    sql: str


class CompiledStatement(NamedTuple):
    """SQL text plus parameters in placeholder order.

    For a batched multi-row insert, ``params`` holds one list per row.
    """
    sql: str
    params: list


def safe_name(identifier: Any) -> str:
    """String form of an identifier, refusing statement separators."""
    entity = str(identifier)
    for ch in SUSPICIOUS_CHARACTERS:
        if ch in entity:
            raise UnsafeIdentifierError(entity, ch)
    return entity


def _check_identifiers(*identifiers: Any) -> None:
    for identifier in identifiers:
        safe_name(identifier)


def _is_pair(value: Any) -> bool:
    return issequence(value) and not isinstance(value, str) and len(value) == 2


def _table(table: Any, opts: Options) -> str:
    entity = safe_name(table)
    return opts.table_fn(entity) if opts.table_fn else entity


def _column(column: Any, opts: Options) -> str:
    entity = safe_name(column)
    return opts.column_fn(entity) if opts.column_fn else entity


def _compiled(sql: str, params: list) -> CompiledStatement:
    logger.debug(f'Compiled statement: {sql}')
    return CompiledStatement(sql, params)


def as_placeholders(n: int | Sized) -> str:
    """``?, ?, ?`` for a count, or for the length of a collection."""
    count = n if isinstance(n, int) else len(n)
    return ', '.join(['?'] * count)


# Projection

def _projection_identifiers(cols: Sequence[Any]) -> list[Any]:
    identifiers = []
    for col in cols:
        if _is_pair(col):
            expr, alias = col
            if not isinstance(expr, Raw):
                identifiers.append(expr)
            identifiers.append(alias)
        elif isinstance(col, Raw):
            raise MalformedStatementSpec(f'expression {col.sql!r} needs an alias')
        else:
            identifiers.append(col)
    return identifiers


def as_cols(cols: Sequence[Any], opts: Options | Mapping | None = None) -> str:
    """Comma-separated column list.

    Each item is a name, a ``(name, alias)`` pair, or an ``(Raw(expr), alias)``
    pair. `column_fn` applies to names and aliases, never to expression text.
    """
    opts = as_options(opts)
    _check_identifiers(*_projection_identifiers(cols))
    parts = []
    for col in cols:
        if _is_pair(col):
            expr, alias = col
            expr = expr.sql if isinstance(expr, Raw) else _column(expr, opts)
            parts.append(f'{expr} AS {_column(alias, opts)}')
        else:
            parts.append(_column(col, opts))
    return ', '.join(parts)


def as_keys(key_map: Mapping[str, Any], opts: Options | Mapping | None = None) -> str:
    """Comma-separated column names of a mapping, in iteration order."""
    return as_cols(list(key_map), opts)


# Where / Set

def by_keys(key_map: Mapping[str, Any], clause: str,
            opts: Options | Mapping | None = None) -> tuple[str, list]:
    """Build a ``SET`` or ``WHERE`` clause from a column/value mapping.

    In ``WHERE`` a None value becomes ``col IS NULL`` and adds no parameter.
    """
    opts = as_options(opts)
    clause = clause.upper()
    if clause not in {'SET', 'WHERE'}:
        raise ValueError(f'clause must be SET or WHERE, not {clause}')
    if not key_map:
        raise MalformedStatementSpec(f'{clause} key map may not be empty')
    _check_identifiers(*key_map)

    conds, params = [], []
    for k, v in key_map.items():
        col = _column(k, opts)
        if clause == 'WHERE' and v is None:
            conds.append(f'{col} IS NULL')
        else:
            conds.append(f'{col} = ?')
            params.append(v)
    joiner = ' AND ' if clause == 'WHERE' else ', '
    return f'{clause} {joiner.join(conds)}', params


def _validate_where(where: Any, allow_all: bool = False) -> None:
    if where is ALL:
        if not allow_all:
            raise MalformedStatementSpec('ALL is only accepted by for_query')
        return
    if isinstance(where, Mapping):
        if not where:
            raise MalformedStatementSpec('where key map may not be empty')
        _check_identifiers(*where)
        return
    if isinstance(where, str):
        return
    if not issequence(where) or not where or not isinstance(where[0], str):
        raise MalformedStatementSpec(
            'where must be a mapping or a sequence of clause text and parameters')


def _where(where: Any, opts: Options) -> tuple[str | None, list]:
    if where is ALL:
        return None, []
    if isinstance(where, Mapping):
        return by_keys(where, 'WHERE', opts)
    if isinstance(where, str):
        return f'WHERE {where}', []
    return f'WHERE {where[0]}', list(where[1:])


# Order by

def for_order_col(col: Any, opts: Options | Mapping | None = None) -> str:
    """One ``ORDER BY`` item from a name or a ``(name, 'asc' | 'desc')`` pair."""
    opts = as_options(opts)
    if isinstance(col, str):
        return _column(col, opts)
    if _is_pair(col) and isinstance(col[0], str):
        name, direction = col
        sql_direction = DIRECTIONS.get(str(direction).lower())
        if sql_direction is None:
            raise MalformedStatementSpec(f'order_by {col!r} expected asc or desc')
        return f'{_column(name, opts)} {sql_direction}'
    raise MalformedStatementSpec(f'order_by expected name or (name, direction), found: {col!r}')


def _validate_order(order_by: Any) -> None:
    if isinstance(order_by, str) or not issequence(order_by):
        raise MalformedStatementSpec('order_by must be a list')
    if not order_by:
        raise MalformedStatementSpec('order_by may not be empty')
    for col in order_by:
        if isinstance(col, str):
            safe_name(col)
        elif _is_pair(col) and isinstance(col[0], str):
            safe_name(col[0])
            if str(col[1]).lower() not in DIRECTIONS:
                raise MalformedStatementSpec(f'order_by {col!r} expected asc or desc')
        else:
            raise MalformedStatementSpec(
                f'order_by expected name or (name, direction), found: {col!r}')


def for_order(order_by: Sequence[Any], opts: Options | Mapping | None = None) -> str:
    """``ORDER BY`` clause from a list of names and (name, direction) pairs."""
    _validate_order(order_by)
    return 'ORDER BY ' + ', '.join(for_order_col(col, opts) for col in order_by)


def _suffix(opts: Options) -> str:
    return f' {opts.suffix}' if opts.suffix else ''


# Statements

def for_insert(table: str, key_map: Mapping[str, Any],
               opts: Options | Mapping | None = None, **kw: Any) -> CompiledStatement:
    """``INSERT`` of one row from a column/value mapping."""
    opts = as_options(opts, **kw)
    if not isinstance(key_map, Mapping) or not key_map:
        raise MalformedStatementSpec('key map may not be empty')
    _check_identifiers(table, *key_map)

    sql = (f'INSERT INTO {_table(table, opts)} ({as_keys(key_map, opts)})'
           f' VALUES ({as_placeholders(key_map)}){_suffix(opts)}')
    return _compiled(sql, list(key_map.values()))


def for_insert_multi(table: str, cols: Sequence[str], rows: Sequence[Sequence[Any]],
                     opts: Options | Mapping | None = None, **kw: Any) -> CompiledStatement:
    """``INSERT`` of many rows given a column list and per-row value lists.

    By default every row gets its own value group and the parameters are
    flattened row by row. With ``batch=True`` a single value group is emitted
    and ``params`` holds one list per row, for `execute_batch`.
    """
    opts = as_options(opts, **kw)
    if not cols:
        raise MalformedStatementSpec('cols may not be empty')
    if not rows:
        raise MalformedStatementSpec('rows may not be empty')
    if any(len(row) != len(cols) for row in rows):
        raise MalformedStatementSpec('column counts are not consistent across cols and rows')
    _check_identifiers(table, *cols)

    group = f'({as_placeholders(cols)})'
    groups = group if opts.batch else ', '.join([group] * len(rows))
    sql = (f'INSERT INTO {_table(table, opts)} ({as_cols(cols, opts)})'
           f' VALUES {groups}{_suffix(opts)}')
    if opts.batch:
        params = [list(row) for row in rows]
    else:
        params = [value for row in rows for value in row]
    return _compiled(sql, params)


def for_update(table: str, key_map: Mapping[str, Any], where: Any,
               opts: Options | Mapping | None = None, **kw: Any) -> CompiledStatement:
    """``UPDATE`` setting a column/value mapping; SET params precede WHERE params."""
    opts = as_options(opts, **kw)
    if not isinstance(key_map, Mapping) or not key_map:
        raise MalformedStatementSpec('key map may not be empty')
    _validate_where(where)
    _check_identifiers(table, *key_map)

    set_clause, set_params = by_keys(key_map, 'SET', opts)
    where_clause, where_params = _where(where, opts)
    sql = f'UPDATE {_table(table, opts)} {set_clause} {where_clause}{_suffix(opts)}'
    return _compiled(sql, set_params + where_params)


def for_delete(table: str, where: Any,
               opts: Options | Mapping | None = None, **kw: Any) -> CompiledStatement:
    """``DELETE`` of the rows matching `where`."""
    opts = as_options(opts, **kw)
    _validate_where(where)
    _check_identifiers(table)

    where_clause, where_params = _where(where, opts)
    sql = f'DELETE FROM {_table(table, opts)} {where_clause}{_suffix(opts)}'
    return _compiled(sql, where_params)


def for_query(table: str, where: Any = ALL,
              opts: Options | Mapping | None = None, **kw: Any) -> CompiledStatement:
    """``SELECT`` with optional projection, ordering and pagination.

    Pagination placeholders and parameters, by dialect:

    - ``top``: ``SELECT TOP ? ...``; the parameter comes before the WHERE params
    - ``limit`` [``offset``]: ``... LIMIT ? OFFSET ?``; params ``limit, offset``
    - ``offset`` [``fetch``]: ``... OFFSET ? ROWS FETCH NEXT ? ROWS ONLY``;
      params ``offset, fetch``
    """
    opts = as_options(opts, **kw)
    _validate_where(where, allow_all=True)
    if opts.order_by is not None:
        _validate_order(opts.order_by)
    if opts.columns:
        _check_identifiers(*_projection_identifiers(opts.columns))
    _check_identifiers(table)

    params = []
    parts = ['SELECT']
    if opts.pagination == 'top':
        parts.append('TOP ?')
        params.append(opts.top)
    parts.append(as_cols(opts.columns, opts) if opts.columns else '*')
    parts.append(f'FROM {_table(table, opts)}')

    where_clause, where_params = _where(where, opts)
    if where_clause:
        parts.append(where_clause)
    params.extend(where_params)

    if opts.order_by is not None:
        parts.append(for_order(opts.order_by, opts))

    if opts.pagination == 'limit':
        parts.append('LIMIT ?')
        params.append(opts.limit)
        if opts.offset is not None:
            parts.append('OFFSET ?')
            params.append(opts.offset)
    elif opts.pagination == 'fetch':
        if opts.offset is not None:
            parts.append('OFFSET ? ROWS')
            params.append(opts.offset)
        if opts.fetch is not None:
            parts.append('FETCH NEXT ? ROWS ONLY')
            params.append(opts.fetch)

    return _compiled(' '.join(parts) + _suffix(opts), params)
