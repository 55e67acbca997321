"""
DuckDB installer database driver - offline diffing away from Windows.

The base database is a DuckDB file holding installer tables under their
installer names (e.g. "Property" with columns "Property" and "Value").
A transform is a Parquet change log with the _TransformView columns, as
written by `transform-diff --export`. Applying it in view mode registers
the log as the _TransformView table on this connection only, so the base
file is never modified.
"""
import logging
import os
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional

try:
    import duckdb
except ImportError:
    duckdb = None

try:
    import pyarrow as pa
    import pyarrow.parquet as pq
except ImportError:
    pa = None
    pq = None

from .base import InstallerDatabase, InstallerDatabaseDriver, InstallerView, OpenMode, Record
from ..errors import OpenFailure, TransformViewUnsupported
from ..types.change_record import ChangeKind, ChangeRecord
from ..util.arrow_utils import REQUIRED_CHANGE_LOG_COLUMNS, as_text, records_to_table, table_to_records

logger = logging.getLogger(__name__)

CHANGE_LOG_TABLE = "_TransformView"


class DuckDBView(InstallerView):
    """
    View over the database connection itself. Temporary objects such as the
    registered change log are connection-local, so no separate cursor is used.
    """

    def __init__(self, database: "DuckDBDatabase", sql: str):
        self.database = database
        self.sql = sql
        self._result = None
        self._closed = False

    def execute(self) -> None:
        if self._closed:
            raise RuntimeError("view is closed")
        start_time = time.time()
        self._result = self.database.con.execute(self.sql)
        self.database._query_count += 1
        self.database._total_time += (time.time() - start_time)

    def fetch(self) -> Optional[Record]:
        if self._result is None:
            raise RuntimeError("view has not been executed")
        row = self._result.fetchone()
        if row is None:
            return None
        return Record(tuple(as_text(v) for v in row))

    def close(self) -> None:
        self._result = None
        self._closed = True


class DuckDBDatabase(InstallerDatabase):

    def __init__(self, path: str, mode: OpenMode, con: "duckdb.DuckDBPyConnection"):
        super().__init__(path, mode)
        self.con = con
        self._query_count = 0
        self._total_time = 0.0
        if mode is OpenMode.TRANSACTED:
            self.con.execute("BEGIN TRANSACTION")

    def quote_identifier(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def table_exists(self, name: str) -> bool:
        # A failing probe query would abort an open transaction
        count = self.con.execute(
            "SELECT count(*) FROM ("
            "SELECT table_name AS name FROM duckdb_tables() "
            "UNION ALL SELECT view_name AS name FROM duckdb_views()"
            ") WHERE lower(name) = lower(?)",
            [name],
        ).fetchone()[0]
        return count > 0

    def open_view(self, sql: str) -> DuckDBView:
        return DuckDBView(self, sql)

    def _base_rows(self, table: str) -> Dict[str, Dict[str, Optional[str]]]:
        """
        Key -> {column: value} lookup over a base table, keyed by its first
        column. Empty when the table is missing.
        """
        if not self.table_exists(table):
            return {}
        result = self.con.execute(f"SELECT * FROM {self.quote_identifier(table)}")
        columns = [d[0] for d in result.description]
        return {
            as_text(row[0]): {c: as_text(v) for c, v in zip(columns, row)}
            for row in result.fetchall()
        }

    def _fill_current(self, records: List[ChangeRecord]) -> List[ChangeRecord]:
        """Base values for the value rows of every table the log touches"""
        tables = {r.table for r in records if r.kind is ChangeKind.VALUE}
        base = {t: self._base_rows(t) for t in tables}
        return [
            replace(r, current=base[r.table].get(r.row, {}).get(r.column))
            if r.kind is ChangeKind.VALUE
            else r
            for r in records
        ]

    def apply_transform_view(self, transform_path: str) -> None:
        try:
            log = pq.read_table(transform_path)
        except (pa.ArrowInvalid, OSError) as e:
            raise TransformViewUnsupported(transform_path, f"cannot read change log: {e}") from e

        missing = [c for c in REQUIRED_CHANGE_LOG_COLUMNS if c not in log.column_names]
        if missing:
            raise TransformViewUnsupported(
                transform_path, f"change log is missing columns: {', '.join(missing)}"
            )

        records = table_to_records(log)
        if "Current" not in log.column_names:
            records = self._fill_current(records)

        view_table = records_to_table(records)
        self.con.register(CHANGE_LOG_TABLE, view_table)
        logger.debug("Registered %s with %d rows from %s", CHANGE_LOG_TABLE, view_table.num_rows, transform_path)

    def get_stats(self) -> Dict[str, Any]:
        avg_time = self._total_time / self._query_count if self._query_count > 0 else 0
        return {
            "query_count": self._query_count,
            "total_time": self._total_time,
            "avg_query_time": avg_time,
            "path": self.path,
        }

    def close(self) -> None:
        if self.con is None:
            return
        try:
            if self.mode is OpenMode.TRANSACTED:
                self.con.execute("ROLLBACK")
        finally:
            self.con.close()
            self.con = None

    def __del__(self):
        """Cleanup on deletion"""
        if getattr(self, "con", None) is not None:
            self.close()


class DuckDBDriver(InstallerDatabaseDriver):
    name = "duckdb"

    def __init__(self):
        if duckdb is None:
            raise ImportError("duckdb package required. Install: pip install duckdb")
        if pa is None:
            raise ImportError("pyarrow package required. Install: pip install pyarrow")

    def open_database(self, path: str, mode: OpenMode = OpenMode.READ_ONLY) -> DuckDBDatabase:
        if not os.path.isfile(path):
            raise OpenFailure(path, "file does not exist")
        try:
            con = duckdb.connect(database=path, read_only=(mode is OpenMode.READ_ONLY))
        except duckdb.Error as e:
            raise OpenFailure(path, str(e)) from e
        logger.debug("Opened %s (%s) with duckdb", path, mode.value)
        return DuckDBDatabase(path, mode, con)
