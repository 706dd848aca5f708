"""
Eager execution, lazy reduction and fold against SQLite.
"""
import sqlite3

import pytest
from sqlrows import ColumnReader, DriverError, Record, as_arrays, execute, execute_batch
from sqlrows import execute_one, fold, for_insert_multi, for_query, plan
from sqlrows import reduced, select, select_one
from sqlrows.statement import CompiledStatement


class TestExecute:

    def test_params(self, sl_conn):
        result = execute(sl_conn, 'select name from person where age > ? and age < ?', 30, 40)
        assert result == [Record({'name': 'Bob'})]

    def test_compiled_statement(self, sl_conn):
        stmt = for_query('person', {'nickname': None}, columns=['name'], order_by=['name'])
        assert execute(sl_conn, stmt) == [Record({'name': 'Alice'}), Record({'name': 'Sean'})]

    def test_compiled_statement_takes_no_args(self, sl_conn):
        with pytest.raises(TypeError):
            execute(sl_conn, CompiledStatement('select 1', []), 1)

    def test_update_count(self, sl_conn):
        assert execute(sl_conn, 'update person set age = age + 1 where age > ?', 30) == [
            Record({'update_count': 2})]
        assert execute(sl_conn, 'delete from person where id = ?', 99) == [
            Record({'update_count': 0})]

    def test_update_count_ignores_row_builder(self, sl_conn):
        result = execute(sl_conn, 'delete from address', builder_fn=as_arrays)
        assert result == [Record({'update_count': 2})]

    def test_driver_error(self, sl_conn):
        with pytest.raises(DriverError) as exc:
            execute(sl_conn, 'select * from nope')
        assert isinstance(exc.value.__cause__, sqlite3.OperationalError)

    def test_small_fetch_size(self, sl_conn):
        result = execute(sl_conn, 'select id from person order by id', fetch_size=1)
        assert [r['id'] for r in result] == [1, 2, 3]


class TestExecuteOne:

    def test_first_row(self, sl_conn):
        row = execute_one(sl_conn, 'select id, name from person order by id')
        assert row == Record({'id': 1, 'name': 'Sean'})

    def test_no_row(self, sl_conn):
        assert execute_one(sl_conn, 'select id from person where id < 0') is None

    def test_update_count(self, sl_conn):
        assert execute_one(sl_conn, 'update person set nickname = ?', 'x') == Record({'update_count': 3})

    def test_array_row(self, sl_conn):
        assert execute_one(sl_conn, 'select id, name from person where id = 3',
                           builder_fn=as_arrays) == (3, 'Alice')


class TestExecuteBatch:

    def test_batched_insert(self, sl_conn):
        stmt = for_insert_multi('address', ['id', 'person_id', 'name'],
                                [[30, 3, 'Cabin'], [40, 3, 'Boat']], batch=True)
        assert execute_batch(sl_conn, stmt) == 2
        names = select(sl_conn, 'name', 'select name from address where person_id = ? order by id', 3)
        assert names == ['Cabin', 'Boat']

    def test_sql_and_groups(self, sl_conn):
        count = execute_batch(sl_conn, 'update person set age = ? where id = ?', [[1, 1], [2, 2]])
        assert count == 2
        assert select(sl_conn, 'age', 'select age from person order by id') == [1, 2, 28]

    def test_compiled_statement_takes_no_groups(self, sl_conn):
        stmt = for_insert_multi('address', ['id'], [[1]], batch=True)
        with pytest.raises(TypeError):
            execute_batch(sl_conn, stmt, [[2]])


class TestPlan:

    def test_reduce(self, sl_conn):
        total = plan(sl_conn, 'select age from person').reduce(lambda acc, row: acc + row['age'], 0)
        assert total == 105

    def test_reduce_is_repeatable(self, sl_conn):
        p = plan(sl_conn, 'select id from person where id > ?', 1)
        count = lambda acc, row: acc + 1
        assert p.reduce(count, 0) == 2
        assert p.reduce(count, 0) == 2

    def test_early_termination(self, sl_conn):
        seen = []

        def step(acc, row):
            seen.append(row['id'])
            if row['id'] == 2:
                return reduced(acc + [row['name']])
            return acc + [row['name']]

        result = plan(sl_conn, 'select id, name from person order by id').reduce(step, [])
        assert result == ['Sean', 'Bob']
        assert seen == [1, 2]

    def test_empty(self, sl_conn):
        assert plan(sl_conn, 'select id from person where id < 0').reduce(
            lambda acc, row: acc + 1, 0) == 0

    def test_update_count_is_reduced_once(self, sl_conn):
        result = plan(sl_conn, 'update person set age = 0').reduce(
            lambda acc, row: acc + [row['update_count']], [])
        assert result == [3]

    def test_iteration(self, sl_conn):
        names = [row['name'] for row in plan(sl_conn, 'select name from person order by id')]
        assert names == ['Sean', 'Bob', 'Alice']

    def test_iteration_update_count(self, sl_conn):
        assert list(plan(sl_conn, 'delete from address')) == [Record({'update_count': 2})]


class TestBooleanColumns:

    def test_sqlite_booleans_are_read_as_stored(self, sl_conn):
        rows = execute(sl_conn, 'select active from person order by id')
        assert [type(row['active']) for row in rows] == [int, int, int]
        assert [row['active'] for row in rows] == [1, 0, 1]

    def test_reader_by_label(self, sl_conn):
        reader = ColumnReader().with_label('active', lambda value, _: bool(value))
        rows = execute(sl_conn, 'select active from person order by id', reader=reader)
        assert [row['active'] for row in rows] == [True, False, True]
        assert all(type(row['active']) is bool for row in rows)


class TestSelectHelpers:

    def test_select_one_column(self, sl_conn):
        assert select_one(sl_conn, 'name', 'select * from person where id = ?', 2) == 'Bob'
        assert select_one(sl_conn, 'name', 'select * from person where id < 0') is None

    def test_select_one_subset(self, sl_conn):
        row = select_one(sl_conn, ['id', 'age'], 'select * from person order by id')
        assert row == Record({'id': 1, 'age': 42})

    def test_select_callable(self, sl_conn):
        result = select(sl_conn, lambda row: f'{row["name"]}:{row["age"]}',
                        'select * from person order by id')
        assert result == ['Sean:42', 'Bob:35', 'Alice:28']

    def test_select_into(self, sl_conn):
        assert select(sl_conn, 'active', 'select active from person', into=set) == {0, 1}
        assert select(sl_conn, ['name'], 'select * from person where id = 1', into=tuple) == (
            Record({'name': 'Sean'}),)

    def test_statement_without_rows(self, sl_conn):
        assert select_one(sl_conn, 'name', 'update person set age = 1') == Record({'update_count': 3})
        assert select(sl_conn, ['name'], 'delete from address') == [Record({'update_count': 2})]

    def test_select_with_options(self, sl_conn):
        result = select(sl_conn, 'person/name', 'select name from person order by id',
                        table_name='person')
        assert result == ['Sean', 'Bob', 'Alice']

    def test_bad_cols(self, sl_conn):
        with pytest.raises(TypeError):
            select(sl_conn, 42, 'select * from person')


class TestFold:

    @pytest.mark.parametrize('chunk_size', [1, 2, 512])
    def test_sum(self, sl_conn, chunk_size):
        total = fold(sl_conn, 'select age from person',
                     reducef=lambda acc, row: acc + row['age'],
                     combinef=lambda *xs: sum(xs),
                     chunk_size=chunk_size, max_workers=2)
        assert total == 105

    def test_collect(self, sl_conn):
        names = fold(sl_conn, 'select name from person where age > ?', 30,
                     reducef=lambda acc, row: acc | {row['name']},
                     combinef=lambda a=frozenset(), b=frozenset(): a | b,
                     chunk_size=1)
        assert names == {'Sean', 'Bob'}

    def test_arrays(self, sl_conn):
        total = fold(sl_conn, 'select id, age from person', builder_fn=as_arrays,
                     reducef=lambda acc, row: acc + row[1],
                     combinef=lambda *xs: sum(xs))
        assert total == 105

    def test_empty_returns_identity(self, sl_conn):
        assert fold(sl_conn, 'select age from person where id < 0',
                    reducef=lambda acc, row: acc + 1,
                    combinef=lambda *xs: sum(xs)) == 0

    def test_bad_chunk_size(self, sl_conn):
        with pytest.raises(ValueError):
            fold(sl_conn, 'select 1', reducef=lambda a, r: a, combinef=lambda *xs: 0,
                 chunk_size=0)
