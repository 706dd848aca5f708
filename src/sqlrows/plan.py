"""
Helpers that reduce a statement without building whole rows.

`cols` picks what each row contributes:

- a column name: that column's value
- a list of names: a `Record` with just those columns
- a callable: called with the `RowView`

Statements that produce no rows yield the update-count record as-is.

>>> select_one(cn, 'name', 'select * from person where id = ?', 1)
'Sean'
>>> select(cn, ['id', 'name'], 'select * from person', into=set)
"""
from collections.abc import Callable
from typing import Any

from sqlrows.result_set import plan, reduced
from sqlrows.rows import RowView
from sqlrows.types import Record

from libb import issequence

__all__ = ['select_one', 'select']


def _picker(cols: Any) -> Callable[[RowView], Any]:
    if callable(cols):
        return cols
    if isinstance(cols, str):
        return lambda row: row[cols]
    if issequence(cols):
        return lambda row: Record({col: row[col] for col in cols})
    raise TypeError(f'cols must be a name, a list of names or a callable, not {type(cols)}')


def _selector(cols: Any) -> Callable[[RowView | Record], Any]:
    """Picker that passes the update-count record through unchanged."""
    pick = _picker(cols)
    return lambda row: row if isinstance(row, Record) else pick(row)


def select_one(connectable: Any, cols: Any, sql: Any, *args: Any, **kw: Any) -> Any:
    """Selection from the first row, or None when there are no rows."""
    pick = _selector(cols)
    return plan(connectable, sql, *args, **kw).reduce(
        lambda _, row: reduced(pick(row)), None)


def select(connectable: Any, cols: Any, sql: Any, *args: Any,
           into: Callable = list, **kw: Any) -> Any:
    """Selection from every row, collected with `into` (list by default)."""
    pick = _selector(cols)

    def step(acc: list, row: RowView) -> list:
        acc.append(pick(row))
        return acc

    return into(plan(connectable, sql, *args, **kw).reduce(step, []))
