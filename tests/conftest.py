"""
Shared fixtures: a DuckDB base database, change-log Parquet files and an
in-memory fake driver.
"""
from typing import List, Optional, Sequence, Tuple

import duckdb
import pyarrow as pa
import pyarrow.parquet as pq
import pytest

from transform_diff.backends.base import (
    InstallerDatabase,
    InstallerDatabaseDriver,
    InstallerView,
    OpenMode,
    Record,
)
from transform_diff.errors import OpenFailure, TransformViewUnsupported
from transform_diff.types.change_record import ChangeRecord


# Foo inserted, Bar modified, Baz deleted
SCENARIO_LOG = {
    "Table": ["Property", "Property", "Property", "Property"],
    "Column": ["INSERT", "Value", "Value", "DELETE"],
    "Row": ["Foo", "Foo", "Bar", "Baz"],
    "Data": [None, "newval", "b2", None],
}

BASE_PROPERTIES = [("Bar", "b1"), ("Baz", "zz"), ("ProductName", "Demo")]


@pytest.fixture
def scenario_records() -> List[ChangeRecord]:
    return [
        ChangeRecord.from_row("Property", "INSERT", "Foo", None),
        ChangeRecord.from_row("Property", "Value", "Foo", "newval"),
        ChangeRecord.from_row("Property", "Value", "Bar", "b2", "b1"),
        ChangeRecord.from_row("Property", "DELETE", "Baz", None),
    ]


@pytest.fixture
def base_db(tmp_path) -> str:
    """DuckDB base database with a Property table"""
    path = str(tmp_path / "product.duckdb")
    con = duckdb.connect(path)
    con.execute('CREATE TABLE "Property" ("Property" VARCHAR, "Value" VARCHAR)')
    con.executemany('INSERT INTO "Property" VALUES (?, ?)', BASE_PROPERTIES)
    con.close()
    return path


@pytest.fixture
def transform_log(tmp_path) -> str:
    """Exported change log without a Current column"""
    path = str(tmp_path / "custom.parquet")
    pq.write_table(pa.table(SCENARIO_LOG), path)
    return path


def make_settings_db(path: str) -> str:
    con = duckdb.connect(path)
    con.execute('CREATE TABLE "Settings" ("Name" VARCHAR, "Setting" VARCHAR, "Type" VARCHAR)')
    con.executemany('INSERT INTO "Settings" VALUES (?, ?, ?)', [("k", "old", "50"), ("m", "on", "1")])
    con.close()
    return path


def make_settings_log(path: str) -> str:
    pq.write_table(pa.table({
        "Table": ["Settings", "Settings", "Settings", "Settings"],
        "Column": ["Setting", "Type", "INSERT", "Setting"],
        "Row": ["k", "k", "n", "n"],
        "Data": ["new", "51", None, "fresh"],
    }), path)
    return path


@pytest.fixture
def transform_file(tmp_path) -> str:
    """An existing transform path for fake-driver tests"""
    path = tmp_path / "custom.mst"
    path.write_bytes(b"transform")
    return str(path)


class FakeView(InstallerView):

    def __init__(self, rows: Sequence[Tuple[Optional[str], ...]]):
        self.rows = list(rows)
        self.position = None
        self.closed = False

    def execute(self):
        self.position = 0

    def fetch(self):
        if self.position is None or self.position >= len(self.rows):
            return None
        row = self.rows[self.position]
        self.position += 1
        return Record(tuple(row))

    def close(self):
        self.closed = True


class FakeDatabase(InstallerDatabase):

    def __init__(self, path, mode, tables=None, apply_error: Optional[str] = None):
        super().__init__(path, mode)
        self.tables = dict(tables or {})
        self.pending_log = None
        self.apply_error = apply_error
        self.applied = []
        self.views = []
        self.closed = False

    def apply_transform_view(self, transform_path):
        if self.apply_error:
            raise TransformViewUnsupported(transform_path, self.apply_error)
        self.applied.append(transform_path)
        if self.pending_log is not None:
            self.tables["_TransformView"] = self.pending_log

    def open_view(self, sql):
        table = sql.rsplit(" FROM ", 1)[1].strip("`")
        view = FakeView(self.tables[table])
        self.views.append(view)
        return view

    def table_exists(self, name):
        return name in self.tables

    def quote_identifier(self, name):
        return f"`{name}`"

    def close(self):
        self.closed = True


class FakeDriver(InstallerDatabaseDriver):
    """Hands out one FakeDatabase per open and remembers them"""
    name = "fake"

    def __init__(self, change_log=None, tables=None, apply_error=None, missing=()):
        self.change_log = change_log
        self.tables = tables or {}
        self.apply_error = apply_error
        self.missing = set(missing)
        self.opened: List[FakeDatabase] = []

    def open_database(self, path, mode=OpenMode.READ_ONLY):
        if path in self.missing:
            raise OpenFailure(path, "file does not exist")
        db = FakeDatabase(path, mode, self.tables, self.apply_error)
        db.pending_log = self.change_log
        self.opened.append(db)
        return db


@pytest.fixture
def scenario_rows():
    return [
        ("Property", "INSERT", "Foo", None, None),
        ("Property", "Value", "Foo", "newval", None),
        ("Property", "Value", "Bar", "b2", "b1"),
        ("Property", "DELETE", "Baz", None, None),
    ]
