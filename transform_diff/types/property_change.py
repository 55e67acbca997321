"""
Classified Property-table changes and their counts.
"""
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Any, Iterator, List, Optional, Union


@dataclass(frozen=True)
class InsertedProperty:
    """A property added by the transform. value is None when no companion value row exists."""
    operation: ClassVar[str] = "INSERT"
    property: str
    value: Optional[str] = None

    @property
    def value_absent(self) -> bool:
        return self.value is None

    def to_dict(self) -> Dict[str, Any]:
        return {"operation": self.operation, "property": self.property, "value": self.value}


@dataclass(frozen=True)
class ModifiedProperty:
    """A property whose value the transform changes"""
    operation: ClassVar[str] = "MODIFY"
    property: str
    new_value: Optional[str]
    old_value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "property": self.property,
            "new_value": self.new_value,
            "old_value": self.old_value,
        }


@dataclass(frozen=True)
class DeletedProperty:
    """A property removed by the transform"""
    operation: ClassVar[str] = "DELETE"
    property: str

    def to_dict(self) -> Dict[str, Any]:
        return {"operation": self.operation, "property": self.property}


PropertyChange = Union[InsertedProperty, ModifiedProperty, DeletedProperty]


@dataclass(frozen=True)
class ChangeSummary:
    inserted: int = 0
    modified: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.modified + self.deleted

    def to_dict(self) -> Dict[str, int]:
        return {
            "inserted": self.inserted,
            "modified": self.modified,
            "deleted": self.deleted,
            "total": self.total,
        }


@dataclass
class PropertyChanges:
    """The three change buckets, each in first-encounter order"""
    inserted: List[InsertedProperty] = field(default_factory=list)
    modified: List[ModifiedProperty] = field(default_factory=list)
    deleted: List[DeletedProperty] = field(default_factory=list)

    def __iter__(self) -> Iterator[PropertyChange]:
        yield from self.inserted
        yield from self.modified
        yield from self.deleted

    def __len__(self) -> int:
        return len(self.inserted) + len(self.modified) + len(self.deleted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inserted": [c.to_dict() for c in self.inserted],
            "modified": [c.to_dict() for c in self.modified],
            "deleted": [c.to_dict() for c in self.deleted],
        }
