"""
Unit tests for column naming policies.
"""
from sqlrows.naming import LOWER, QUALIFIED, UNQUALIFIED, UNQUALIFIED_LOWER
from sqlrows.naming import NamingPolicy, modified, unqualified_modified
from sqlrows.types import ColumnDescriptor


def test_default_policy_is_qualified():
    assert NamingPolicy().name_of('person', 'name') == 'person/name'
    assert QUALIFIED.name_of('person', 'name') == 'person/name'


def test_unqualified():
    assert UNQUALIFIED.name_of('person', 'name') == 'name'
    assert UNQUALIFIED_LOWER.name_of('PERSON', 'Name') == 'name'


def test_lower_cases_each_segment():
    assert LOWER.name_of('PERSON', 'NAME') == 'person/name'
    assert LOWER.name_of('Person', 'name') == 'person/name'


def test_unknown_qualifier_gives_bare_label():
    assert QUALIFIED.name_of('', 'name') == 'name'
    assert QUALIFIED.name_of(None, 'name') == 'name'


def test_qualifier_fn_always_gets_a_string():
    seen = []

    def qualifier_fn(s):
        seen.append(s)
        return s.upper()

    policy = modified(qualifier_fn, str.lower)
    assert policy.name_of(None, 'NAME') == 'name'
    assert policy.name_of('person', 'NAME') == 'PERSON/name'
    assert seen == ['', 'person']


def test_qualifier_fn_may_supply_a_qualifier():
    policy = modified(lambda q: q or 'unknown', str.lower)
    assert policy.name_of('', 'ID') == 'unknown/id'


def test_unqualified_modified():
    policy = unqualified_modified(str.upper)
    assert policy.name_of('person', 'name') == 'NAME'


def test_names_keeps_collisions():
    descriptors = [
        ColumnDescriptor(0, 'id', 'person'),
        ColumnDescriptor(1, 'id', 'address'),
        ColumnDescriptor(2, 'name', ''),
    ]
    assert QUALIFIED.names(descriptors) == ['person/id', 'address/id', 'name']
    assert UNQUALIFIED.names(descriptors) == ['id', 'id', 'name']
