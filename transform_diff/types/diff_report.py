"""
DiffReport - result of TransformDiffController.diff
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .change_record import ChangeRecord
from .property_change import PropertyChanges, ChangeSummary


@dataclass
class DiffReport:
    msi_path: str
    mst_path: Optional[str]
    changes: PropertyChanges = field(default_factory=PropertyChanges)
    summary: ChangeSummary = field(default_factory=ChangeSummary)
    records: Optional[List[ChangeRecord]] = None  # only kept for the verbose dump
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "msi_path": self.msi_path,
            "mst_path": self.mst_path,
            "changes": self.changes.to_dict(),
            "summary": self.summary.to_dict(),
            "warnings": list(self.warnings),
        }
        if self.records is not None:
            result["change_log"] = [r.to_dict() for r in self.records]
        return result
