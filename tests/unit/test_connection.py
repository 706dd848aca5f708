"""
Unit tests for dialect detection and connectable unwrapping.
"""
import pytest
import sqlalchemy as sa
from sqlrows.connection import dbapi_connection, get_dialect_name


def test_dialect_of_dbapi_connections(fake_connection):
    assert get_dialect_name(fake_connection('postgresql')) == 'postgresql'
    assert get_dialect_name(fake_connection('sqlite')) == 'sqlite'


def test_unknown_dialect(fake_connection):
    with pytest.raises(AttributeError):
        get_dialect_name(fake_connection('unknown'))


def test_dialect_of_sqlalchemy_objects(sl_engine):
    assert get_dialect_name(sl_engine) == 'sqlite'
    with sl_engine.connect() as conn:
        assert get_dialect_name(conn) == 'sqlite'


def test_dbapi_connection_passes_through(fake_connection):
    cn = fake_connection('postgresql')
    with dbapi_connection(cn) as (raw, dialect):
        assert raw is cn
        assert dialect == 'postgresql'


def test_engine_checkout_commits(sl_engine):
    with dbapi_connection(sl_engine) as (raw, dialect):
        assert dialect == 'sqlite'
        cursor = raw.cursor()
        cursor.execute("insert into address (id, person_id, name) values (30, 3, 'Cabin')")
        cursor.close()

    with sl_engine.connect() as conn:
        count = conn.execute(sa.text('select count(*) from address')).scalar()
    assert count == 3


def test_engine_checkout_rolls_back(sl_engine):
    with pytest.raises(RuntimeError):
        with dbapi_connection(sl_engine) as (raw, _):
            cursor = raw.cursor()
            cursor.execute("insert into address (id, person_id, name) values (30, 3, 'Cabin')")
            cursor.close()
            raise RuntimeError('abort')

    with sl_engine.connect() as conn:
        count = conn.execute(sa.text('select count(*) from address')).scalar()
    assert count == 2
