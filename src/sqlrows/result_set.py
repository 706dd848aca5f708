"""
Statement execution and result reduction.

Two paths over the same cursor adapter:

- lazy: `plan()` returns a `Plan` whose ``reduce(fn, init)`` hands each row
  to `fn` as a `RowView`. Only the columns `fn` touches are read. Return
  ``reduced(value)`` from `fn` to stop early.
- eager: `execute()` builds every row with the configured row builder and
  collects them with the configured result-set builder.

Statements that produce no rows yield a single ``Record({'update_count': n})``
on both paths, regardless of builder options.

>>> total = plan(cn, 'select amount from payment').reduce(
...     lambda acc, row: acc + row['amount'], 0)
"""
import logging
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from functools import reduce
from typing import Any

from sqlrows.builders import as_list, build_row
from sqlrows.connection import dbapi_connection
from sqlrows.cursor import CursorAdapter, driver_errors
from sqlrows.options import Options, as_options
from sqlrows.rows import RowView
from sqlrows.statement import CompiledStatement
from sqlrows.types import ArrayResult, Record, update_count_record

logger = logging.getLogger(__name__)

__all__ = [
    'Plan',
    'Reduced',
    'reduced',
    'plan',
    'execute',
    'execute_one',
    'execute_batch',
    'fold',
]


class Reduced:
    """Wraps an accumulator to stop a reduction early."""

    __slots__ = ('value',)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f'Reduced({self.value!r})'


def reduced(value: Any) -> Reduced:
    return Reduced(value)


def statement_parts(sql: str | CompiledStatement, args: Sequence) -> tuple[str, list]:
    """Split a SQL string plus positional args, or a compiled statement."""
    if isinstance(sql, CompiledStatement):
        if args:
            raise TypeError('parameters are already part of the compiled statement')
        return sql.sql, list(sql.params)
    return sql, list(args)


@contextmanager
def open_statement(connectable: Any, sql: str, params: Sequence,
                   opts: Options) -> Iterator[CursorAdapter]:
    """Execute one statement and yield its cursor adapter, closing it after."""
    with dbapi_connection(connectable) as (cn, dialect):
        with driver_errors('cursor'):
            cursor = cn.cursor()
        adapter = CursorAdapter(cursor, dialect, opts.table_name, opts.fetch_size)
        try:
            adapter.execute(sql, params)
            yield adapter
        finally:
            adapter.close()


class Plan:
    """A statement waiting to be reduced.

    Nothing runs until `reduce` is called or the plan is iterated, and each
    call executes the statement again.
    """

    def __init__(self, connectable: Any, sql: str, params: list, opts: Options) -> None:
        self.connectable = connectable
        self.sql = sql
        self.params = params
        self.opts = opts

    def reduce(self, fn: Callable[[Any, Any], Any], init: Any) -> Any:
        """Fold `fn` over the rows as `RowView` objects."""
        with open_statement(self.connectable, self.sql, self.params, self.opts) as adapter:
            if not adapter.has_result_set:
                acc = fn(init, update_count_record(adapter.update_count))
                return acc.value if isinstance(acc, Reduced) else acc
            builder = self.opts.builder_fn(adapter, self.opts)
            acc = init
            count = 0
            while adapter.advance():
                count += 1
                acc = fn(acc, RowView(builder))
                if isinstance(acc, Reduced):
                    logger.debug(f'Reduction stopped early after {count} rows')
                    return acc.value
            logger.debug(f'Reduced {count} rows')
            return acc

    def __iter__(self) -> Iterator[RowView | Record]:
        """Yield each row as a `RowView`; the cursor closes with the generator."""
        with open_statement(self.connectable, self.sql, self.params, self.opts) as adapter:
            if not adapter.has_result_set:
                yield update_count_record(adapter.update_count)
                return
            builder = self.opts.builder_fn(adapter, self.opts)
            while adapter.advance():
                yield RowView(builder)

    def __repr__(self) -> str:
        return f'Plan({self.sql!r}, {self.params!r})'


def plan(connectable: Any, sql: str | CompiledStatement, *args: Any,
         opts: Options | dict | None = None, **kw: Any) -> Plan:
    """Prepare a lazily reduced statement.

    >>> plan(cn, 'select name from person where id > ?', 10).reduce(
    ...     lambda names, row: names + [row['name']], [])
    """
    sql, params = statement_parts(sql, args)
    return Plan(connectable, sql, params, as_options(opts, **kw))


def execute(connectable: Any, sql: str | CompiledStatement, *args: Any,
            opts: Options | dict | None = None, **kw: Any) -> Any:
    """Execute a statement and return the fully built result set."""
    opts = as_options(opts, **kw)
    sql, params = statement_parts(sql, args)
    with open_statement(connectable, sql, params, opts) as adapter:
        if not adapter.has_result_set:
            return [update_count_record(adapter.update_count)]
        row_builder = opts.builder_fn(adapter, opts)
        rs_builder = opts.result_set_fn(row_builder, opts)
        rs = rs_builder.new_result_set()
        count = 0
        while adapter.advance():
            rs = rs_builder.add_row(rs, build_row(row_builder))
            count += 1
        logger.debug(f'Built {count} rows')
        return rs_builder.finalize(rs)


def execute_one(connectable: Any, sql: str | CompiledStatement, *args: Any,
                opts: Options | dict | None = None, **kw: Any) -> Any:
    """First row only (None when there is none), or the update-count record."""
    opts = as_options(opts, **kw)
    sql, params = statement_parts(sql, args)
    with open_statement(connectable, sql, params, opts) as adapter:
        if not adapter.has_result_set:
            return update_count_record(adapter.update_count)
        row_builder = opts.builder_fn(adapter, opts)
        if not adapter.advance():
            return None
        return build_row(row_builder)


def execute_batch(connectable: Any, sql: str | CompiledStatement,
                  param_groups: Sequence[Sequence] | None = None,
                  opts: Options | dict | None = None, **kw: Any) -> int:
    """Run one statement per parameter group; returns the total update count.

    Takes a batched `for_insert_multi` statement, or SQL text plus groups.
    """
    opts = as_options(opts, **kw)
    if isinstance(sql, CompiledStatement):
        if param_groups is not None:
            raise TypeError('parameters are already part of the compiled statement')
        sql, param_groups = sql
    with dbapi_connection(connectable) as (cn, dialect):
        with driver_errors('cursor'):
            cursor = cn.cursor()
        adapter = CursorAdapter(cursor, dialect, opts.table_name, opts.fetch_size)
        try:
            return adapter.executemany(sql, param_groups or [])
        finally:
            adapter.close()


def _chunks(rows: list, size: int) -> Iterator[list]:
    for i in range(0, len(rows), size):
        yield rows[i:i + size]


def fold(connectable: Any, sql: str | CompiledStatement, *args: Any,
         reducef: Callable[[Any, Any], Any], combinef: Callable[..., Any],
         chunk_size: int = 512, max_workers: int | None = None,
         opts: Options | dict | None = None, **kw: Any) -> Any:
    """Parallel reduce over a fully buffered result set.

    Rows are built eagerly first, then split into chunks of `chunk_size`.
    Each chunk is reduced with `reducef` starting from ``combinef()`` and
    the chunk results are combined with `combinef`, so ``combinef()`` must
    return the identity value.

    >>> fold(cn, 'select amount from payment',
    ...      reducef=lambda acc, row: acc + row['amount'],
    ...      combinef=lambda *xs: sum(xs))
    """
    if chunk_size < 1:
        raise ValueError('chunk_size must be positive')
    opts = as_options(opts, **kw)
    rows = execute(connectable, sql, *args, opts=as_options(opts, result_set_fn=as_list))
    if isinstance(rows, ArrayResult):
        rows = rows.rows

    chunks = list(_chunks(rows, chunk_size))
    logger.debug(f'Folding {len(rows)} rows in {len(chunks)} chunks')
    if not chunks:
        return combinef()

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        partials = list(executor.map(lambda chunk: reduce(reducef, chunk, combinef()), chunks))
    return reduce(combinef, partials, combinef())
