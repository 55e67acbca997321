"""
Rendering of DiffReport for the terminal.
"""
import json
from typing import List, Optional, Sequence, Tuple

from ..types.change_record import ChangeRecord
from ..types.diff_report import DiffReport
from ..types.property_change import (
    ChangeSummary,
    DeletedProperty,
    InsertedProperty,
    ModifiedProperty,
    PropertyChange,
)

DUMP_HEADERS = ("Table", "Column", "Row", "Data", "Current")


def _show(value: Optional[str]) -> str:
    return "" if value is None else value


def format_table(headers: Sequence[str], rows: List[Sequence[str]]) -> List[str]:
    """Left-aligned fixed-width columns separated by two spaces"""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)).rstrip()]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    return lines


def format_change_log(records: List[ChangeRecord]) -> List[str]:
    rows = [
        (r.table, r.column, _show(r.row), _show(r.data), _show(r.current))
        for r in records
    ]
    return [f"Change log ({len(records)} rows)"] + format_table(DUMP_HEADERS, rows)


def format_change(change: PropertyChange, absent_label: str = "<absent>") -> str:
    if isinstance(change, InsertedProperty):
        value = absent_label if change.value_absent else change.value
        return f"INSERT  {change.property} = {value}"
    if isinstance(change, ModifiedProperty):
        return f"MODIFY  {change.property} = {_show(change.new_value)} (was {_show(change.old_value)})"
    if isinstance(change, DeletedProperty):
        return f"DELETE  {change.property}"
    raise TypeError(f"Unknown change type: {type(change).__name__}")


def format_summary(summary: ChangeSummary) -> str:
    return (
        f"Totals: {summary.inserted} inserted, {summary.modified} modified, "
        f"{summary.deleted} deleted, {summary.total} total"
    )


def render_text(report: DiffReport, absent_label: str = "<absent>") -> str:
    lines = [f"Base database: {report.msi_path}", f"Transform:     {report.mst_path}", ""]

    for warning in report.warnings:
        lines.append(f"WARNING: {warning}")
    if report.warnings:
        lines.append("")

    if report.records is not None:
        lines.extend(format_change_log(report.records))
        lines.append("")

    lines.append("Property changes")
    if len(report.changes):
        lines.extend(f"  {format_change(c, absent_label)}" for c in report.changes)
    else:
        lines.append("  (none)")
    lines.append("")
    lines.append(format_summary(report.summary))
    return "\n".join(lines)


def render_json(report: DiffReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def render_properties(msi_path: str, properties: List[Tuple[str, Optional[str]]]) -> str:
    rows = [(_show(name), _show(value)) for name, value in properties]
    lines = [f"Base database: {msi_path}", f"Property table ({len(rows)} rows)"]
    lines.extend(format_table(("Property", "Value"), rows))
    return "\n".join(lines)
