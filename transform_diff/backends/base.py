"""
Installer database driver interface.

A driver opens databases; a database applies transforms and opens views; a
view is executed once and fetched forward-only until it returns None. Only
one view should be open per database at a time.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class OpenMode(Enum):
    READ_ONLY = "readonly"
    TRANSACTED = "transacted"


@dataclass(frozen=True)
class Record:
    """A fetched row. Fields are 1-based, as in the installer API."""
    values: Tuple[Optional[str], ...]

    @property
    def field_count(self) -> int:
        return len(self.values)

    def string_data(self, field: int) -> Optional[str]:
        if field < 1 or field > len(self.values):
            raise IndexError(f"record field {field} out of range 1..{len(self.values)}")
        return self.values[field - 1]


class InstallerView(ABC):
    """A query cursor over one database handle"""

    @abstractmethod
    def execute(self) -> None:
        pass

    @abstractmethod
    def fetch(self) -> Optional[Record]:
        """Return the next record, or None when the view is exhausted"""
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class InstallerDatabase(ABC):
    """An open installer database handle"""

    def __init__(self, path: str, mode: OpenMode):
        self.path = path
        self.mode = mode

    @abstractmethod
    def apply_transform_view(self, transform_path: str) -> None:
        """Apply a transform in view mode, populating the change-log table"""
        pass

    @abstractmethod
    def open_view(self, sql: str) -> InstallerView:
        pass

    @abstractmethod
    def table_exists(self, name: str) -> bool:
        pass

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the handle. Safe to call more than once."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class InstallerDatabaseDriver(ABC):
    """Factory for database handles"""
    name = "abstract"

    @abstractmethod
    def open_database(self, path: str, mode: OpenMode = OpenMode.READ_ONLY) -> InstallerDatabase:
        """Open a base database, raising OpenFailure when it cannot be opened"""
        pass
