import pytest
from sqlrows.builders import as_arrays, as_list, as_maps
from sqlrows.exceptions import MalformedStatementSpec
from sqlrows.options import Options, as_options, pagination_dialect
from sqlrows.readers import default_reader


def test_init_defaults():
    """Test default initialization"""
    options = Options()

    assert options.builder_fn is as_maps
    assert options.result_set_fn is as_list
    assert options.reader is default_reader
    assert options.fetch_size == 500
    assert options.batch is False
    assert options.pagination is None
    assert options.table_fn is None
    assert options.column_fn is None


def test_validation():
    """Test validation rules"""
    with pytest.raises(ValueError):
        Options(fetch_size=0)

    with pytest.raises(MalformedStatementSpec):
        Options(top=1, limit=2)


@pytest.mark.parametrize(('kw', 'expected'), [
    ({}, None),
    ({'top': 5}, 'top'),
    ({'limit': 5}, 'limit'),
    ({'limit': 5, 'offset': 10}, 'limit'),
    ({'offset': 10}, 'fetch'),
    ({'fetch': 5}, 'fetch'),
    ({'offset': 10, 'fetch': 5}, 'fetch'),
    ({'limit': 0}, 'limit'),
])
def test_pagination_dialect(kw, expected):
    assert pagination_dialect(**kw) == expected
    assert Options(**kw).pagination == expected


@pytest.mark.parametrize('kw', [
    {'top': 1, 'limit': 1},
    {'top': 1, 'offset': 1},
    {'top': 1, 'fetch': 1},
    {'limit': 1, 'fetch': 1},
    {'limit': 1, 'offset': 1, 'fetch': 1},
])
def test_conflicting_pagination(kw):
    with pytest.raises(MalformedStatementSpec):
        pagination_dialect(**kw)


def test_as_options():
    """Test coercion from None, dicts and Options plus overrides"""
    assert as_options().builder_fn is as_maps

    opts = as_options({'builder_fn': as_arrays}, limit=10)
    assert opts.builder_fn is as_arrays
    assert opts.limit == 10

    base = Options(limit=5)
    assert as_options(base) is base

    derived = as_options(base, offset=3)
    assert derived is not base
    assert (derived.limit, derived.offset) == (5, 3)
    assert base.offset is None


def test_as_options_overrides_win():
    assert as_options({'limit': 1}, limit=2).limit == 2


def test_as_options_rejects_unknown_keys():
    with pytest.raises(TypeError):
        as_options({'limt': 10})


def test_override_validates_again():
    with pytest.raises(MalformedStatementSpec):
        as_options(Options(top=5), limit=10)
