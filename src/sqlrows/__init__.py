"""
Data access over DB-API cursors with pluggable row building.

Statements can be run eagerly (`execute`, `execute_one`) or reduced lazily
over cursor-backed row views (`plan`), and structured insert/update/delete/
select descriptions compile to parameterized SQL (`sqlrows.statement`).

Row and result-set shapes are chosen per call through options:

    execute(cn, 'select * from person', builder_fn=as_unqualified_maps)
    execute(cn, 'select * from person', builder_fn=as_arrays,
            result_set_fn=as_dataframe)
"""
__version__ = '0.1.0'

from sqlrows import optional, quoted
from sqlrows.builders import ArrayRowBuilder, ListResultSetBuilder, MapRowBuilder
from sqlrows.builders import RowBuilder, ResultSetBuilder, as_arrays, as_list
from sqlrows.builders import as_lower_arrays, as_lower_maps, as_maps
from sqlrows.builders import as_modified_arrays, as_modified_maps
from sqlrows.builders import as_unqualified_arrays, as_unqualified_lower_arrays
from sqlrows.builders import as_unqualified_lower_maps, as_unqualified_maps
from sqlrows.builders import as_unqualified_modified_arrays
from sqlrows.builders import as_unqualified_modified_maps
from sqlrows.connection import get_dialect_name
from sqlrows.cursor import CursorAdapter
from sqlrows.dataframe import as_arrow_dataframe, as_dataframe
from sqlrows.exceptions import DataAccessError, DriverError, MalformedStatementSpec
from sqlrows.exceptions import StaleRowError, UnsafeIdentifierError
from sqlrows.naming import LOWER, QUALIFIED, UNQUALIFIED, UNQUALIFIED_LOWER
from sqlrows.naming import NamingPolicy
from sqlrows.options import Options, as_options
from sqlrows.plan import select, select_one
from sqlrows.query import delete, find_by_keys, get_by_id, insert, insert_multi
from sqlrows.query import navigate, query, update
from sqlrows.readers import ColumnReader, LargeObject, as_large_object
from sqlrows.readers import default_reader, read_as_default, read_as_instant
from sqlrows.readers import read_as_local
from sqlrows.result_set import Plan, execute, execute_batch, execute_one, fold
from sqlrows.result_set import plan, reduced
from sqlrows.rows import RowView
from sqlrows.statement import ALL, CompiledStatement, Raw, for_delete, for_insert
from sqlrows.statement import for_insert_multi, for_query, for_update
from sqlrows.types import ArrayResult, ColumnDescriptor, Record

__all__ = [
    'optional',
    'quoted',
    # execution
    'plan',
    'Plan',
    'reduced',
    'execute',
    'execute_one',
    'execute_batch',
    'fold',
    'select',
    'select_one',
    # friendly functions
    'insert',
    'insert_multi',
    'query',
    'find_by_keys',
    'get_by_id',
    'update',
    'delete',
    'navigate',
    # statements
    'ALL',
    'Raw',
    'CompiledStatement',
    'for_insert',
    'for_insert_multi',
    'for_update',
    'for_delete',
    'for_query',
    # rows and builders
    'RowView',
    'Record',
    'ArrayResult',
    'ColumnDescriptor',
    'CursorAdapter',
    'RowBuilder',
    'ResultSetBuilder',
    'MapRowBuilder',
    'ArrayRowBuilder',
    'ListResultSetBuilder',
    'as_maps',
    'as_unqualified_maps',
    'as_modified_maps',
    'as_unqualified_modified_maps',
    'as_lower_maps',
    'as_unqualified_lower_maps',
    'as_arrays',
    'as_unqualified_arrays',
    'as_modified_arrays',
    'as_unqualified_modified_arrays',
    'as_lower_arrays',
    'as_unqualified_lower_arrays',
    'as_list',
    'as_dataframe',
    'as_arrow_dataframe',
    # naming and readers
    'NamingPolicy',
    'QUALIFIED',
    'UNQUALIFIED',
    'LOWER',
    'UNQUALIFIED_LOWER',
    'ColumnReader',
    'LargeObject',
    'as_large_object',
    'default_reader',
    'read_as_instant',
    'read_as_local',
    'read_as_default',
    # configuration and errors
    'Options',
    'as_options',
    'get_dialect_name',
    'DataAccessError',
    'DriverError',
    'StaleRowError',
    'MalformedStatementSpec',
    'UnsafeIdentifierError',
]
