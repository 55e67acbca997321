"""
Utilities for moving change logs in and out of Arrow tables.
"""
from typing import Any, Iterable, List, Optional, Union
import os

try:
    import pyarrow as pa
    import pyarrow.parquet as pq
except ImportError:
    pa = None
    pq = None

from ..types.change_record import ChangeRecord

# Column order of the installer's _TransformView table
CHANGE_LOG_COLUMNS = ("Table", "Column", "Row", "Data", "Current")
REQUIRED_CHANGE_LOG_COLUMNS = ("Table", "Column", "Row", "Data")


def change_log_schema() -> "pa.Schema":
    if pa is None:
        raise ImportError("pyarrow is required for arrow_utils")
    return pa.schema([(name, pa.string()) for name in CHANGE_LOG_COLUMNS])


def records_to_table(records: Iterable[ChangeRecord]) -> "pa.Table":
    """
    Convert change records to an Arrow table with the _TransformView columns.

    Markers keep their raw Column value (INSERT, DELETE, ...), so the table
    can be read back as a change log.
    """
    if pa is None:
        raise ImportError("pyarrow is required for arrow_utils")

    rows = [
        {
            "Table": r.table,
            "Column": r.column,
            "Row": r.row,
            "Data": r.data,
            "Current": r.current,
        }
        for r in records
    ]
    if not rows:
        return change_log_schema().empty_table()
    return pa.Table.from_pylist(rows, schema=change_log_schema())


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def table_to_records(table: "pa.Table") -> List[ChangeRecord]:
    """
    Inverse of records_to_table. Non-string cells are converted to text and
    a missing Current column reads as None.
    """
    if pa is None:
        raise ImportError("pyarrow is required for arrow_utils")

    return [
        ChangeRecord.from_row(*(as_text(row.get(name)) for name in CHANGE_LOG_COLUMNS))
        for row in table.to_pylist()
    ]


def write_change_log(records: Union[Iterable[ChangeRecord], "pa.Table"], path: str) -> int:
    """
    Write a change log to a Parquet file, returning the number of rows written.
    """
    if pq is None:
        raise ImportError("pyarrow is required for arrow_utils")

    table = records if isinstance(records, pa.Table) else records_to_table(records)
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    pq.write_table(table, path)
    return table.num_rows
