"""
Connectable handling.

Statements run against any of:

- a DB-API connection (``sqlite3``, ``psycopg``): used as-is; the caller
  owns the transaction
- a SQLAlchemy `Connection`: its pooled DB-API connection is used; the
  caller owns the transaction
- a SQLAlchemy `Engine`: a raw pooled connection is checked out for the
  statement, committed on success, rolled back on failure and returned
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlrows.cursor import driver_errors

logger = logging.getLogger(__name__)

__all__ = ['get_dialect_name', 'dbapi_connection']


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a database connection or engine.

    Raises
        AttributeError: If dialect cannot be determined
    """
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return str(obj.engine.dialect.name).lower()

    if hasattr(obj, 'dbapi_connection'):
        return get_dialect_name(obj.dbapi_connection)

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


@contextmanager
def dbapi_connection(connectable: Any) -> Iterator[tuple[Any, str]]:
    """Yield ``(dbapi_connection, dialect_name)`` for one statement."""
    dialect = get_dialect_name(connectable)

    if isinstance(connectable, Engine):
        with driver_errors('connect'):
            raw = connectable.raw_connection()
        try:
            yield raw, dialect
        except Exception:
            logger.debug('Rolling back engine connection')
            with driver_errors('rollback'):
                raw.rollback()
            raise
        else:
            with driver_errors('commit'):
                raw.commit()
        finally:
            raw.close()
        return

    if isinstance(connectable, sa.Connection):
        yield connectable.connection, dialect
        return

    yield connectable, dialect
