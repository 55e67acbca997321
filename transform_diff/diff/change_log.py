"""
Reading the change log materialized by applying a transform in view mode.
"""
import logging
from typing import Iterator

from ..backends.base import InstallerDatabase
from ..errors import ChangeLogUnavailable
from ..types.change_record import ChangeRecord
from ..util.arrow_utils import CHANGE_LOG_COLUMNS

logger = logging.getLogger(__name__)


def change_log_query(db: InstallerDatabase, table: str = "_TransformView") -> str:
    columns = ", ".join(db.quote_identifier(c) for c in CHANGE_LOG_COLUMNS)
    return f"SELECT {columns} FROM {db.quote_identifier(table)}"


def read_change_log(db: InstallerDatabase, table: str = "_TransformView") -> Iterator[ChangeRecord]:
    """
    Yield one ChangeRecord per change-log row.

    Lazy and forward-only: the underlying view stays open until the sequence
    is exhausted or the generator is closed. Iterate again to re-run the
    query. Raises ChangeLogUnavailable on first iteration when the table
    does not exist.
    """
    if not db.table_exists(table):
        raise ChangeLogUnavailable(table)

    view = db.open_view(change_log_query(db, table))
    count = 0
    try:
        view.execute()
        while True:
            record = view.fetch()
            if record is None:
                break
            count += 1
            yield ChangeRecord.from_row(
                record.string_data(1),
                record.string_data(2),
                record.string_data(3),
                record.string_data(4),
                record.string_data(5),
            )
    finally:
        view.close()
        logger.debug("Read %d change-log rows from %s", count, table)
