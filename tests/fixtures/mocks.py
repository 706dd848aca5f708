"""
Fake DB-API objects for tests that need no real database.

Usage:
    def test_placeholders(fake_connection):
        cn = fake_connection('postgresql', description=[('id', 23)], rows=[(1,)])
        execute(cn, 'select id from t where id = ?', 1)
        assert cn.cursor_obj.executed == [('select id from t where id = %s', (1,))]
"""
import pytest


class FakeCursor:
    """Minimal DB-API cursor replaying canned rows."""

    def __init__(self, description=None, rows=(), rowcount=-1, fail_on=None, error=None):
        self.description = description
        self._rows = list(rows)
        self.rowcount = rowcount
        self.fail_on = fail_on
        self.error = error
        self.executed = []
        self.fetch_calls = 0
        self.closed = False

    def _maybe_fail(self, operation):
        if self.fail_on == operation:
            raise self.error

    def execute(self, sql, params=None):
        self._maybe_fail('execute')
        self.executed.append((sql, params))

    def executemany(self, sql, param_groups):
        self._maybe_fail('executemany')
        self.executed.append((sql, list(param_groups)))
        self.rowcount = len(param_groups)

    def fetchmany(self, size):
        self._maybe_fail('fetch')
        self.fetch_calls += 1
        batch, self._rows = self._rows[:size], self._rows[size:]
        return batch

    def close(self):
        self.closed = True


def _create_fake_connection(connection_type='postgresql', **cursor_kw):
    """Fake connection whose class name passes dialect detection."""
    class FakeConnection:
        def __init__(self):
            self.cursor_obj = FakeCursor(**cursor_kw)

        def cursor(self):
            return self.cursor_obj

    if connection_type == 'postgresql':
        FakeConnection.__module__ = 'psycopg'
    elif connection_type == 'sqlite':
        FakeConnection.__module__ = 'sqlite3'
    else:
        FakeConnection.__module__ = 'unknown_db'
    FakeConnection.__name__ = 'Connection'
    FakeConnection.__qualname__ = 'Connection'

    return FakeConnection()


@pytest.fixture
def fake_cursor():
    """Factory for `FakeCursor` objects."""
    return FakeCursor


@pytest.fixture
def fake_connection():
    """Factory for fake connections of a given dialect.

    Example usage:
        cn = fake_connection('sqlite', description=[('id',)], rows=[(1,)])
    """
    def factory(connection_type='postgresql', **cursor_kw):
        return _create_fake_connection(connection_type, **cursor_kw)

    return factory
