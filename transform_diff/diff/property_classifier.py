"""
Classification of change-log records into Property-table changes.

The change log describes an inserted row as an INSERT marker plus one value
row per column, all keyed by the same row; a modified value as a value row
alone; a deleted row as a DELETE marker alone. Classification joins the
insert markers with their value rows so that each change is reported once.
"""
from typing import Dict, Iterable, List, Tuple

from ..types.change_record import ChangeKind, ChangeRecord
from ..types.property_change import (
    ChangeSummary,
    DeletedProperty,
    InsertedProperty,
    ModifiedProperty,
    PropertyChanges,
)


def classify_property_changes(
    records: Iterable[ChangeRecord],
    table: str = "Property",
    value_column: str = "Value",
) -> PropertyChanges:
    """
    Partition the records of `table` into inserted, modified and deleted.

    Every value row whose key also has an INSERT marker belongs to that
    insert and is never reported as a modification; only the `value_column`
    row supplies the inserted value. Any other value row is a modification,
    one per (key, column). Keys keep the order in which they were first
    seen. Consumes `records` in a single pass.
    """
    insert_keys: Dict[str, None] = {}
    delete_keys: Dict[str, None] = {}
    value_rows: Dict[Tuple[str, str], ChangeRecord] = {}

    for record in records:
        if record.table != table or record.row is None:
            continue
        if record.kind is ChangeKind.INSERT:
            insert_keys.setdefault(record.row)
        elif record.kind is ChangeKind.DELETE:
            delete_keys.setdefault(record.row)
        elif not record.is_marker:
            value_rows[(record.row, record.column)] = record

    inserted: List[InsertedProperty] = []
    for key in insert_keys:
        companion = value_rows.get((key, value_column))
        inserted.append(InsertedProperty(key, companion.data if companion is not None else None))

    modified = [
        ModifiedProperty(key, record.data, record.current)
        for (key, _column), record in value_rows.items()
        if key not in insert_keys
    ]
    deleted = [DeletedProperty(key) for key in delete_keys]

    return PropertyChanges(inserted=inserted, modified=modified, deleted=deleted)


def summarize(
    inserted: List[InsertedProperty],
    modified: List[ModifiedProperty],
    deleted: List[DeletedProperty],
) -> ChangeSummary:
    return ChangeSummary(inserted=len(inserted), modified=len(modified), deleted=len(deleted))
