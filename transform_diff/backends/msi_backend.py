"""
Windows Installer driver - direct ctypes binding to msi.dll.

Only available on Windows. Every MSIHANDLE opened here is closed with
MsiCloseHandle; a transacted database is never committed, so applying a
transform in view mode leaves the base file untouched.
"""
import ctypes
import logging
import os
import sys
from typing import Optional

from .base import InstallerDatabase, InstallerDatabaseDriver, InstallerView, OpenMode, Record
from ..errors import OpenFailure, TransformViewUnsupported

logger = logging.getLogger(__name__)

# Persist modes for MsiOpenDatabase
MSIDBOPEN_READONLY = 0
MSIDBOPEN_TRANSACT = 1

# Error conditions for MsiDatabaseApplyTransform
MSITRANSFORM_ERROR_VIEWTRANSFORM = 0x100

# MsiDatabaseIsTablePersistent results
MSICONDITION_FALSE = 0  # temporary table
MSICONDITION_TRUE = 1   # persistent table
MSICONDITION_NONE = 2   # no such table
MSICONDITION_ERROR = 3

ERROR_SUCCESS = 0
ERROR_MORE_DATA = 234
ERROR_NO_MORE_ITEMS = 259

_PERSIST_MODES = {
    OpenMode.READ_ONLY: MSIDBOPEN_READONLY,
    OpenMode.TRANSACTED: MSIDBOPEN_TRANSACT,
}

MSIHANDLE = ctypes.c_ulong


def persist_mode(mode: OpenMode) -> int:
    return _PERSIST_MODES[mode]


def quote_msi_identifier(name: str) -> str:
    return f"`{name}`"


def describe_error(code: int) -> str:
    if sys.platform == "win32":
        return f"error {code}: {ctypes.FormatError(code).strip()}"
    return f"error {code}"


def _load_msi_library():
    """Load msi.dll and declare the functions used by this module"""
    if sys.platform != "win32":
        raise OSError("the Windows Installer driver requires Windows (msi.dll)")

    lib = ctypes.WinDLL("msi")
    UINT = ctypes.c_uint
    LPCWSTR = ctypes.c_wchar_p
    PHANDLE = ctypes.POINTER(MSIHANDLE)
    PDWORD = ctypes.POINTER(ctypes.c_ulong)

    signatures = {
        "MsiOpenDatabaseW": [LPCWSTR, ctypes.c_void_p, PHANDLE],
        "MsiDatabaseApplyTransformW": [MSIHANDLE, LPCWSTR, ctypes.c_int],
        "MsiDatabaseOpenViewW": [MSIHANDLE, LPCWSTR, PHANDLE],
        "MsiDatabaseIsTablePersistentW": [MSIHANDLE, LPCWSTR],
        "MsiViewExecute": [MSIHANDLE, MSIHANDLE],
        "MsiViewFetch": [MSIHANDLE, PHANDLE],
        "MsiViewClose": [MSIHANDLE],
        "MsiRecordGetFieldCount": [MSIHANDLE],
        "MsiRecordIsNull": [MSIHANDLE, UINT],
        "MsiRecordGetStringW": [MSIHANDLE, UINT, ctypes.c_wchar_p, PDWORD],
        "MsiCloseHandle": [MSIHANDLE],
    }
    for name, argtypes in signatures.items():
        func = getattr(lib, name)
        func.argtypes = argtypes
        func.restype = UINT
    lib.MsiDatabaseIsTablePersistentW.restype = ctypes.c_int
    lib.MsiRecordIsNull.restype = ctypes.c_int
    return lib


class MsiView(InstallerView):

    def __init__(self, lib, handle: int, sql: str):
        self._lib = lib
        self._handle = handle
        self.sql = sql
        self._executed = False

    def execute(self) -> None:
        if not self._handle:
            raise RuntimeError("view is closed")
        rc = self._lib.MsiViewExecute(self._handle, 0)
        if rc != ERROR_SUCCESS:
            raise OSError(f"MsiViewExecute failed for {self.sql!r}: {describe_error(rc)}")
        self._executed = True

    def fetch(self) -> Optional[Record]:
        if not self._executed:
            raise RuntimeError("view has not been executed")
        record = MSIHANDLE(0)
        rc = self._lib.MsiViewFetch(self._handle, ctypes.byref(record))
        if rc == ERROR_NO_MORE_ITEMS:
            return None
        if rc != ERROR_SUCCESS:
            raise OSError(f"MsiViewFetch failed: {describe_error(rc)}")
        handle = record.value
        try:
            count = self._lib.MsiRecordGetFieldCount(handle)
            return Record(tuple(self._string_data(handle, i) for i in range(1, count + 1)))
        finally:
            self._lib.MsiCloseHandle(handle)

    def _string_data(self, record: int, field: int) -> Optional[str]:
        if self._lib.MsiRecordIsNull(record, field):
            return None
        size = ctypes.c_ulong(256)
        buffer = ctypes.create_unicode_buffer(size.value)
        rc = self._lib.MsiRecordGetStringW(record, field, buffer, ctypes.byref(size))
        if rc == ERROR_MORE_DATA:
            # size now holds the length without the terminator
            size = ctypes.c_ulong(size.value + 1)
            buffer = ctypes.create_unicode_buffer(size.value)
            rc = self._lib.MsiRecordGetStringW(record, field, buffer, ctypes.byref(size))
        if rc != ERROR_SUCCESS:
            raise OSError(f"MsiRecordGetString failed for field {field}: {describe_error(rc)}")
        return buffer.value

    def close(self) -> None:
        if not self._handle:
            return
        try:
            self._lib.MsiViewClose(self._handle)
        finally:
            self._lib.MsiCloseHandle(self._handle)
            self._handle = 0


class MsiDatabase(InstallerDatabase):

    def __init__(self, path: str, mode: OpenMode, lib, handle: int):
        super().__init__(path, mode)
        self._lib = lib
        self._handle = handle

    def quote_identifier(self, name: str) -> str:
        return quote_msi_identifier(name)

    def table_exists(self, name: str) -> bool:
        condition = self._lib.MsiDatabaseIsTablePersistentW(self._handle, name)
        return condition in (MSICONDITION_FALSE, MSICONDITION_TRUE)

    def apply_transform_view(self, transform_path: str) -> None:
        rc = self._lib.MsiDatabaseApplyTransformW(
            self._handle, transform_path, MSITRANSFORM_ERROR_VIEWTRANSFORM
        )
        if rc != ERROR_SUCCESS:
            raise TransformViewUnsupported(transform_path, describe_error(rc))
        logger.debug("Applied %s to %s in view mode", transform_path, self.path)

    def open_view(self, sql: str) -> MsiView:
        view = MSIHANDLE(0)
        rc = self._lib.MsiDatabaseOpenViewW(self._handle, sql, ctypes.byref(view))
        if rc != ERROR_SUCCESS:
            raise OSError(f"MsiDatabaseOpenView failed for {sql!r}: {describe_error(rc)}")
        return MsiView(self._lib, view.value, sql)

    def close(self) -> None:
        if not self._handle:
            return
        self._lib.MsiCloseHandle(self._handle)
        self._handle = 0

    def __del__(self):
        """Cleanup on deletion"""
        if getattr(self, "_handle", 0):
            self.close()


class MsiDriver(InstallerDatabaseDriver):
    name = "msi"

    def __init__(self, lib=None):
        self._lib = lib if lib is not None else _load_msi_library()

    def open_database(self, path: str, mode: OpenMode = OpenMode.READ_ONLY) -> MsiDatabase:
        if not os.path.isfile(path):
            raise OpenFailure(path, "file does not exist")
        handle = MSIHANDLE(0)
        rc = self._lib.MsiOpenDatabaseW(path, ctypes.c_void_p(persist_mode(mode)), ctypes.byref(handle))
        if rc != ERROR_SUCCESS:
            raise OpenFailure(path, describe_error(rc))
        logger.debug("Opened %s (%s) with msi.dll", path, mode.value)
        return MsiDatabase(path, mode, self._lib, handle.value)
