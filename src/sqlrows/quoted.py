"""
Identifier quoting functions for the ``table_fn`` and ``column_fn`` options.

Embedded quote characters are doubled, so quoted names stay well formed:

>>> ansi('user')
'"user"'
>>> mysql('order')
'`order`'
>>> schema(ansi)('public.user')
'"public"."user"'
"""
from collections.abc import Callable

__all__ = ['ansi', 'mysql', 'sql_server', 'oracle', 'postgres', 'sqlite', 'schema']


def ansi(s: str) -> str:
    """ANSI "quoting"."""
    return '"' + s.replace('"', '""') + '"'


def mysql(s: str) -> str:
    """MySQL `quoting`."""
    return '`' + s.replace('`', '``') + '`'


def sql_server(s: str) -> str:
    """SQL Server [quoting]."""
    return '[' + s.replace(']', ']]') + ']'


oracle = ansi
postgres = ansi
sqlite = ansi


def schema(quoting: Callable[[str], str]) -> Callable[[str], str]:
    """Quote each dot-separated part of a name separately."""
    def quote(s: str) -> str:
        return '.'.join(quoting(part) for part in s.split('.'))
    return quote
