"""
Result-set builders that produce pandas DataFrames.

Both builders accept map- or array-shaped rows. Frames always keep their
columns (also for empty results) and carry per-column metadata in
``df.attrs['column_types']``.
"""
from typing import Any

import pandas as pd
import pyarrow as pa
from sqlrows.builders import RowBuilder
from sqlrows.types import Record

__all__ = [
    'DataFrameResultSetBuilder',
    'as_dataframe',
    'as_arrow_dataframe',
]


def column_types(row_builder: RowBuilder) -> dict[str, dict]:
    """Column metadata keyed by exposed column name."""
    types = {}
    for name, d in zip(row_builder.column_names, row_builder.adapter.descriptors()):
        types[name] = {
            'label': d.label,
            'qualifier': d.qualifier,
            'type_code': d.type_code,
            'python_type': d.python_type.__name__ if d.python_type else None,
        }
    return types


class DataFrameResultSetBuilder:
    """Buffers value tuples and builds one DataFrame at the end.

    With ``arrow=True`` the frame is built through a pyarrow Table and uses
    `pd.ArrowDtype` columns.
    """

    def __init__(self, row_builder: RowBuilder, arrow: bool = False) -> None:
        self.row_builder = row_builder
        self.arrow = arrow

    def new_result_set(self) -> list:
        return []

    def add_row(self, rs: list, row: Any) -> list:
        if isinstance(row, Record):
            row = tuple(row.get(name) for name in self.row_builder.column_names)
        rs.append(row)
        return rs

    def finalize(self, rs: list) -> pd.DataFrame:
        names = list(self.row_builder.column_names)
        if not rs:
            df = pd.DataFrame(columns=names)
        elif self.arrow:
            columns_data = [list(col) for col in zip(*rs)]
            df = pa.table(columns_data, names=names).to_pandas(types_mapper=pd.ArrowDtype)
        else:
            df = pd.DataFrame.from_records(rs, columns=names)
        df.attrs['column_types'] = column_types(self.row_builder)
        return df


def as_dataframe(row_builder: RowBuilder, opts: Any = None) -> DataFrameResultSetBuilder:
    """Standard pandas DataFrame using NumPy dtypes."""
    return DataFrameResultSetBuilder(row_builder)


def as_arrow_dataframe(row_builder: RowBuilder, opts: Any = None) -> DataFrameResultSetBuilder:
    """pandas DataFrame backed by PyArrow dtypes."""
    return DataFrameResultSetBuilder(row_builder, arrow=True)
