"""
Forward-only cursor adapter over a DB-API 2.0 (PEP-249) cursor.

The adapter owns a position token that changes every time the cursor moves.
Row views and cursor-bound values capture a `Position` at creation and check
it on every access.
"""
import logging
import time
from collections import deque
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from functools import wraps
from typing import Any

from sqlrows.exceptions import DriverError, DriverFailure, StaleRowError
from sqlrows.sql import standardize_placeholders
from sqlrows.types import ColumnDescriptor, descriptors_from_cursor

logger = logging.getLogger(__name__)


@contextmanager
def driver_errors(operation: str = 'cursor operation') -> Iterator[None]:
    """Wrap driver exceptions into DriverError, never retrying."""
    try:
        yield
    except DriverFailure as exc:
        raise DriverError(f'{operation} failed: {exc}') from exc


def dumpsql(func):
    """Decorator for logging SQL statements and parameters."""
    @wraps(func)
    def wrapper(self, sql: str, params: Sequence = (), *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{sql}\nargs: {params}')
        try:
            return func(self, sql, params, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}\nargs: {params}')
            raise
        finally:
            logger.debug(f'Query time: {time.time() - start:.4f}s')
    return wrapper


class Position:
    """Token for one cursor position."""

    __slots__ = ('adapter', 'token')

    def __init__(self, adapter: 'CursorAdapter', token: int) -> None:
        self.adapter = adapter
        self.token = token

    @property
    def valid(self) -> bool:
        return self.adapter.position_token == self.token

    def check(self) -> None:
        if not self.valid:
            raise StaleRowError(
                f'cursor has moved past row {self.token} '
                f'(now at {self.adapter.position_token}); '
                'convert rows with to_concrete() before advancing')


class CursorAdapter:
    """Forward-only facade over a DB-API cursor.

    Column indexes are 0-based. Rows are pulled from the driver with
    ``fetchmany(fetch_size)`` and handed out one position at a time.
    """

    def __init__(self, cursor: Any, dialect: str | None = None,
                 table_name: str | None = None, fetch_size: int = 500) -> None:
        self.dbapi_cursor = cursor
        self.dialect = dialect
        self.table_name = table_name
        self.fetch_size = fetch_size
        self.position_token = 0
        self._descriptors: tuple[ColumnDescriptor, ...] | None = None
        self._labels: dict[str, int] | None = None
        self._buffer: deque = deque()
        self._current: Sequence | None = None
        self._exhausted = False
        self._closed = False

    @dumpsql
    def execute(self, sql: str, params: Sequence = ()) -> None:
        """Execute a statement, translating placeholders for the dialect."""
        sql = standardize_placeholders(sql, self.dialect, with_params=bool(params))
        with driver_errors('execute'):
            if params:
                self.dbapi_cursor.execute(sql, tuple(params))
            else:
                self.dbapi_cursor.execute(sql)
        self._reset()
        if self.has_result_set:
            logger.debug(f'Result set with {self.column_count()} columns')
        else:
            logger.debug(f'Update count: {self.update_count}')

    @dumpsql
    def executemany(self, sql: str, params: Sequence[Sequence] = ()) -> int:
        """Execute a statement once per parameter group, returning the total count."""
        if not params:
            logger.warning('executemany called with no parameter groups')
            return 0
        sql = standardize_placeholders(sql, self.dialect)
        with driver_errors('executemany'):
            self.dbapi_cursor.executemany(sql, [tuple(p) for p in params])
        self._reset()
        return self.update_count

    def _reset(self) -> None:
        self._descriptors = None
        self._labels = None
        self._buffer.clear()
        self._current = None
        self._exhausted = not self.has_result_set
        self.position_token += 1

    @property
    def has_result_set(self) -> bool:
        return self.dbapi_cursor.description is not None

    @property
    def update_count(self) -> int:
        return self.dbapi_cursor.rowcount

    @property
    def position(self) -> Position:
        return Position(self, self.position_token)

    def advance(self) -> bool:
        """Move to the next row. Returns False once the cursor is exhausted."""
        self.position_token += 1
        if not self._buffer and not self._exhausted:
            with driver_errors('fetch'):
                rows = self.dbapi_cursor.fetchmany(self.fetch_size)
            if rows:
                self._buffer.extend(rows)
            else:
                self._exhausted = True
        if self._buffer:
            self._current = self._buffer.popleft()
            return True
        self._current = None
        return False

    def descriptors(self) -> tuple[ColumnDescriptor, ...]:
        if self._descriptors is None:
            self._descriptors = descriptors_from_cursor(
                self.dbapi_cursor, self.dialect, self.table_name)
        return self._descriptors

    def column_count(self) -> int:
        return len(self.descriptors())

    def descriptor(self, i: int) -> ColumnDescriptor:
        return self.descriptors()[i]

    def value_by_index(self, i: int) -> Any:
        if self._current is None:
            raise StaleRowError('cursor is not positioned on a row')
        return self._current[i]

    def label_index(self, label: str) -> int | None:
        """Index of the first column with this label, or None."""
        if self._labels is None:
            labels = {}
            for d in self.descriptors():
                labels.setdefault(d.label, d.index)
            self._labels = labels
        return self._labels.get(label)

    def value_by_label(self, label: str) -> Any:
        """Raw value for the first column with this label; KeyError if none."""
        i = self.label_index(label)
        if i is None:
            raise KeyError(label)
        return self.value_by_index(i)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.position_token += 1
        self._current = None
        self._buffer.clear()
        with driver_errors('close'):
            self.dbapi_cursor.close()
