"""
Table-level convenience functions.

Each function compiles a statement with `sqlrows.statement` and runs it with
`sqlrows.result_set`; builder and statement options can be mixed freely:

>>> insert(cn, 'person', {'name': 'Sean', 'age': 42})
Record({'update_count': 1})
>>> find_by_keys(cn, 'person', {'age': 42}, order_by=['name'], limit=10)
[Record({'person/id': 1, 'person/name': 'Sean', 'person/age': 42})]

Reads by table use the table name as the column qualifier unless
``table_name`` is given, so default keys come back as ``table/column``.

A row can also be followed through a foreign-key column:

>>> navigate(cn, address, 'address/person_id')
Record({'person/id': 1, 'person/name': 'Sean', 'person/age': 42})
"""
from collections.abc import Mapping, Sequence
from typing import Any

from sqlrows.exceptions import MalformedStatementSpec
from sqlrows.options import Options, as_options
from sqlrows.result_set import execute, execute_batch, execute_one
from sqlrows.statement import ALL, for_delete, for_insert, for_insert_multi
from sqlrows.statement import for_query, for_update

__all__ = [
    'insert',
    'insert_multi',
    'query',
    'find_by_keys',
    'get_by_id',
    'update',
    'delete',
    'navigate',
]


def _table_options(table: str, opts: Options | dict | None, kw: dict) -> Options:
    opts = as_options(opts, **kw)
    if opts.table_name is None:
        opts = as_options(opts, table_name=table)
    return opts


def insert(connectable: Any, table: str, key_map: Mapping[str, Any],
           opts: Options | dict | None = None, **kw: Any) -> Any:
    """Insert one row.

    Returns the update-count record, or the first returned row when the
    ``suffix`` option asks for one (``suffix='RETURNING id'``).
    """
    opts = as_options(opts, **kw)
    return execute_one(connectable, for_insert(table, key_map, opts), opts=opts)


def insert_multi(connectable: Any, table: str, cols: Sequence[str],
                 rows: Sequence[Sequence[Any]],
                 opts: Options | dict | None = None, **kw: Any) -> Any:
    """Insert many rows.

    With ``batch=True`` the rows are submitted one parameter group at a time
    and the total update count is returned; otherwise a single multi-row
    statement runs and its result set is returned.
    """
    opts = as_options(opts, **kw)
    statement = for_insert_multi(table, cols, rows, opts)
    if opts.batch:
        return execute_batch(connectable, statement, opts=opts)
    return execute(connectable, statement, opts=opts)


def query(connectable: Any, sql: str, *args: Any,
          opts: Options | dict | None = None, **kw: Any) -> Any:
    """Run SQL text with positional parameters and return the result set."""
    return execute(connectable, sql, *args, opts=opts, **kw)


def find_by_keys(connectable: Any, table: str, where: Any = ALL,
                 opts: Options | dict | None = None, **kw: Any) -> Any:
    """Rows of `table` matching a key map or ``(clause, *params)``."""
    opts = _table_options(table, opts, kw)
    return execute(connectable, for_query(table, where, opts), opts=opts)


def get_by_id(connectable: Any, table: str, pk: Any, pk_name: str = 'id',
              opts: Options | dict | None = None, **kw: Any) -> Any:
    """The row of `table` whose `pk_name` equals `pk`, or None."""
    opts = _table_options(table, opts, kw)
    return execute_one(connectable, for_query(table, {pk_name: pk}, opts), opts=opts)


def update(connectable: Any, table: str, key_map: Mapping[str, Any], where: Any,
           opts: Options | dict | None = None, **kw: Any) -> Any:
    """Update matching rows; returns ``[Record({'update_count': n})]``."""
    opts = as_options(opts, **kw)
    return execute(connectable, for_update(table, key_map, where, opts), opts=opts)


def delete(connectable: Any, table: str, where: Any,
           opts: Options | dict | None = None, **kw: Any) -> Any:
    """Delete matching rows; returns ``[Record({'update_count': n})]``."""
    opts = as_options(opts, **kw)
    return execute(connectable, for_delete(table, where, opts), opts=opts)


def _reference(column: str, schema: Mapping[str, Sequence[str]] | None) -> tuple | None:
    """``(table, key, cardinality)`` for a column, or None if it refers nowhere.

    The ``schema`` option is consulted by full key and then by bare label;
    otherwise a ``<table>_id`` column refers to ``<table>.id``.
    """
    label = column.rsplit('/', 1)[-1]
    schema = schema or {}
    entry = schema.get(column, schema.get(label))
    if entry is None:
        if label.lower().endswith('_id') and len(label) > 3:
            return label[:-3], 'id', 'one'
        return None
    if isinstance(entry, str) or len(entry) not in {2, 3}:
        raise MalformedStatementSpec(f'schema entry for {column!r} must be (table, key[, cardinality])')
    table, key, *rest = entry
    cardinality = rest[0] if rest else 'one'
    if cardinality not in {'one', 'many'}:
        raise MalformedStatementSpec(f'cardinality must be one or many, not {cardinality!r}')
    return table, key, cardinality


def navigate(connectable: Any, record: Mapping[str, Any], column: str,
             opts: Options | dict | None = None, **kw: Any) -> Any:
    """Follow `column` of `record` to the row(s) it refers to.

    Runs ``SELECT * FROM <table> WHERE <key> = ?`` with the column's value and
    returns one row, or a list for ``'many'`` schema entries. A column that
    refers nowhere yields its own value; a NULL reference yields None. Keys of
    the rows found are qualified by the referenced table.
    """
    value = record[column]
    opts = as_options(opts, **kw)
    ref = _reference(column, opts.schema)
    if ref is None:
        return value
    if value is None:
        return None
    table, key, cardinality = ref
    opts = as_options(opts, table_name=table)
    statement = for_query(table, {key: value}, opts)
    if cardinality == 'many':
        return execute(connectable, statement, opts=opts)
    return execute_one(connectable, statement, opts=opts)
