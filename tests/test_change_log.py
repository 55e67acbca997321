"""
Tests for reading the change-log table.
"""
import pytest

from transform_diff.backends.base import OpenMode
from transform_diff.diff.change_log import change_log_query, read_change_log
from transform_diff.errors import ChangeLogUnavailable
from transform_diff.types.change_record import ChangeKind

from conftest import FakeDatabase


@pytest.fixture
def db(scenario_rows):
    return FakeDatabase("product.msi", OpenMode.TRANSACTED, {"_TransformView": scenario_rows})


def test_query_projects_change_log_columns(db):
    assert change_log_query(db) == (
        "SELECT `Table`, `Column`, `Row`, `Data`, `Current` FROM `_TransformView`"
    )


def test_reads_one_record_per_row(db):
    records = list(read_change_log(db))

    assert [r.row for r in records] == ["Foo", "Foo", "Bar", "Baz"]
    assert [r.kind for r in records] == [
        ChangeKind.INSERT, ChangeKind.VALUE, ChangeKind.VALUE, ChangeKind.DELETE,
    ]
    assert records[2].data == "b2"
    assert records[2].current == "b1"
    assert records[0].data is None


def test_view_closed_after_exhaustion(db):
    list(read_change_log(db))
    assert len(db.views) == 1
    assert db.views[0].closed


def test_view_closed_when_abandoned_early(db):
    records = read_change_log(db)
    next(records)
    records.close()
    assert db.views[0].closed


def test_is_lazy(db):
    records = read_change_log(db)
    assert db.views == []
    next(records)
    assert len(db.views) == 1


def test_restart_reopens_the_query(db):
    assert len(list(read_change_log(db))) == 4
    assert len(list(read_change_log(db))) == 4
    assert len(db.views) == 2


def test_missing_table_raises():
    db = FakeDatabase("product.msi", OpenMode.READ_ONLY)
    with pytest.raises(ChangeLogUnavailable) as exc_info:
        list(read_change_log(db))
    assert exc_info.value.recoverable
    assert "_TransformView" in str(exc_info.value)
    assert db.views == []


def test_empty_change_log():
    db = FakeDatabase("product.msi", OpenMode.READ_ONLY, {"_TransformView": []})
    assert list(read_change_log(db)) == []
