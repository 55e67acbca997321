"""
Driver selection.
"""
import os

from .base import InstallerDatabaseDriver

DUCKDB_EXTENSIONS = (".duckdb", ".ddb", ".db")


def resolve_driver_name(name: str, path: str) -> str:
    """
    Resolve "auto" from the base database path.

    Supports:
        - "*.duckdb", "*.ddb", "*.db" - offline DuckDB snapshot
        - anything else - Windows Installer database (msi.dll)
    """
    if name != "auto":
        return name
    _, ext = os.path.splitext(path)
    return "duckdb" if ext.lower() in DUCKDB_EXTENSIONS else "msi"


def create_driver(name: str = "auto", path: str = "") -> InstallerDatabaseDriver:
    """Factory function to create a driver by name"""
    resolved = resolve_driver_name(name, path)
    if resolved == "duckdb":
        from .duckdb_backend import DuckDBDriver
        return DuckDBDriver()
    if resolved == "msi":
        from .msi_backend import MsiDriver
        return MsiDriver()
    raise ValueError(f"Unknown driver: {name}")
