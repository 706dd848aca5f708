"""
Following foreign-key columns from a row to the rows it refers to.
"""
import pytest
from sqlrows import MalformedStatementSpec, Record, UnsafeIdentifierError, execute
from sqlrows import get_by_id, navigate


def test_default_reference(sl_conn):
    address = get_by_id(sl_conn, 'address', 10)
    person = navigate(sl_conn, address, 'address/person_id')
    assert person['person/id'] == 1
    assert person['person/name'] == 'Sean'


def test_unqualified_key(sl_conn):
    address = execute(sl_conn, 'select * from address where id = ?', 20)[0]
    assert navigate(sl_conn, address, 'person_id')['person/name'] == 'Bob'


def test_missing_target_row(sl_conn):
    assert navigate(sl_conn, Record({'person_id': 99}), 'person_id') is None


def test_null_reference_runs_nothing(sl_conn):
    sl_conn.close()
    assert navigate(sl_conn, Record({'person_id': None}), 'person_id') is None


def test_plain_column_yields_its_value(sl_conn):
    address = get_by_id(sl_conn, 'address', 10)
    assert navigate(sl_conn, address, 'address/name') == 'Home'
    assert navigate(sl_conn, address, 'address/id') == 10


def test_schema_many(sl_conn):
    person = get_by_id(sl_conn, 'person', 1)
    schema = {'id': ('address', 'person_id', 'many')}
    addresses = navigate(sl_conn, person, 'person/id', schema=schema)
    assert addresses == [Record({'address/id': 10, 'address/person_id': 1, 'address/name': 'Home'})]


def test_schema_by_full_key_wins(sl_conn):
    person = get_by_id(sl_conn, 'person', 2)
    schema = {'person/id': ('address', 'person_id', 'many'), 'id': ('address', 'id')}
    addresses = navigate(sl_conn, person, 'person/id', schema=schema)
    assert [a['address/name'] for a in addresses] == ['Work']


def test_schema_one(sl_conn):
    schema = {'owner': ('person', 'id')}
    person = navigate(sl_conn, Record({'owner': 3}), 'owner', schema=schema)
    assert person['person/name'] == 'Alice'


def test_options_flow_to_lookup(sl_conn):
    address = get_by_id(sl_conn, 'address', 10)
    person = navigate(sl_conn, address, 'address/person_id', columns=['name'])
    assert person == Record({'person/name': 'Sean'})


@pytest.mark.parametrize('entry', [
    ('person',),
    'person',
    ('person', 'id', 'several'),
])
def test_malformed_schema_entry(sl_conn, entry):
    with pytest.raises(MalformedStatementSpec):
        navigate(sl_conn, Record({'owner': 1}), 'owner', schema={'owner': entry})


def test_unsafe_schema_table(sl_conn):
    schema = {'owner': ('person; drop table person', 'id')}
    with pytest.raises(UnsafeIdentifierError):
        navigate(sl_conn, Record({'owner': 1}), 'owner', schema=schema)
    assert get_by_id(sl_conn, 'person', 1) is not None
