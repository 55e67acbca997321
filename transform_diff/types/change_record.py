"""
Change-log rows read from the _TransformView table.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any


class ChangeKind(Enum):
    """What a change-log row describes, decoded from its Column field"""
    VALUE = "VALUE"    # Column holds a real column name
    INSERT = "INSERT"  # row inserted
    DELETE = "DELETE"  # row deleted
    CREATE = "CREATE"  # table created
    DROP = "DROP"      # table dropped


_MARKERS = {
    "INSERT": ChangeKind.INSERT,
    "DELETE": ChangeKind.DELETE,
    "CREATE": ChangeKind.CREATE,
    "DROP": ChangeKind.DROP,
}


def decode_kind(column: Optional[str]) -> ChangeKind:
    """Map the overloaded Column field to a ChangeKind"""
    return _MARKERS.get(column or "", ChangeKind.VALUE)


@dataclass(frozen=True)
class ChangeRecord:
    """
    One row of the change log.

    `row` is the primary key of the affected row; for multi-column keys the
    installer joins the key parts with tabs. `data` and `current` are None
    when the change log leaves them empty.
    """
    table: str
    column: str
    row: Optional[str]
    data: Optional[str]
    current: Optional[str]
    kind: ChangeKind

    @classmethod
    def from_row(
        cls,
        table: Optional[str],
        column: Optional[str],
        row: Optional[str],
        data: Optional[str] = None,
        current: Optional[str] = None,
    ) -> "ChangeRecord":
        return cls(
            table=table or "",
            column=column or "",
            row=row,
            data=data,
            current=current,
            kind=decode_kind(column),
        )

    @property
    def is_marker(self) -> bool:
        return self.kind is not ChangeKind.VALUE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "column": self.column,
            "row": self.row,
            "data": self.data,
            "current": self.current,
            "kind": self.kind.value,
        }
