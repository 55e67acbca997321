"""
TransformDiffController - runs the extractor against one base database.
"""
import logging
import os
from typing import Optional, List, Tuple

from .backends.base import InstallerDatabase, InstallerDatabaseDriver, OpenMode
from .backends.factory import create_driver
from .config import TransformDiffConfig, get_config
from .diff.change_log import read_change_log
from .diff.property_classifier import classify_property_changes, summarize
from .errors import ChangeLogUnavailable, TransformNotFound, TransformViewUnsupported
from .types.change_record import ChangeRecord
from .types.diff_report import DiffReport
from .util.arrow_utils import write_change_log

logger = logging.getLogger(__name__)

PROPERTY_KEY_COLUMN = "Property"

TRANSFORM_VIEW_FALLBACK = (
    "This transform cannot be applied in view mode; structured property diffing was skipped."
)
CHANGE_LOG_FALLBACK = "No change log was produced; reporting no property changes."


class TransformDiffController:
    """
    Coordinates: Driver -> ApplyTransformView -> ReadChangeLog -> Classify -> Summarize

    Each call opens its own database handle and releases it before returning,
    so one controller can be reused for independent database/transform pairs.
    """

    def __init__(
        self,
        config: Optional[TransformDiffConfig] = None,
        driver: Optional[InstallerDatabaseDriver] = None,
    ):
        self.config = config or get_config()
        self.config.validate()
        self._driver = driver

        self._diff_count = 0
        self._warning_count = 0

    def driver_for(self, path: str) -> InstallerDatabaseDriver:
        if self._driver is None:
            self._driver = create_driver(self.config.driver, path)
        return self._driver

    def open_base(self, msi_path: str, mode: OpenMode) -> InstallerDatabase:
        return self.driver_for(msi_path).open_database(msi_path, mode)

    def diff(self, msi_path: str, mst_path: str, include_change_log: Optional[bool] = None) -> DiffReport:
        """
        Classify the Property-table changes mst_path would make to msi_path.

        OpenFailure and TransformNotFound propagate. A transform that cannot
        be viewed, or a missing change log, yields an empty report carrying
        a warning.
        """
        if include_change_log is None:
            include_change_log = self.config.include_change_log
        if not os.path.isfile(mst_path):
            raise TransformNotFound(mst_path)

        self._diff_count += 1
        report = DiffReport(msi_path=msi_path, mst_path=mst_path)
        mode = OpenMode(self.config.transform_open_mode)

        with self.open_base(msi_path, mode) as db:
            try:
                db.apply_transform_view(mst_path)
            except TransformViewUnsupported as e:
                self._warn(report, f"{e}. {TRANSFORM_VIEW_FALLBACK}")
                return report

            try:
                records = self._capture(db)
            except ChangeLogUnavailable as e:
                self._warn(report, f"{e}. {CHANGE_LOG_FALLBACK}")
                records = []

        changes = classify_property_changes(
            records, table=self.config.property_table, value_column=self.config.value_column
        )
        report.changes = changes
        report.summary = summarize(changes.inserted, changes.modified, changes.deleted)
        if include_change_log:
            report.records = records

        logger.info(
            "%s + %s: %d inserted, %d modified, %d deleted",
            msi_path, mst_path,
            report.summary.inserted, report.summary.modified, report.summary.deleted,
        )
        return report

    def read_properties(self, msi_path: str) -> List[Tuple[str, Optional[str]]]:
        """Inspection mode: list the base Property table without a transform"""
        table = self.config.property_table
        with self.open_base(msi_path, OpenMode.READ_ONLY) as db:
            if not db.table_exists(table):
                logger.warning("%s has no %s table", msi_path, table)
                return []
            sql = "SELECT {}, {} FROM {}".format(
                db.quote_identifier(PROPERTY_KEY_COLUMN),
                db.quote_identifier(self.config.value_column),
                db.quote_identifier(table),
            )
            properties = []
            with db.open_view(sql) as view:
                view.execute()
                record = view.fetch()
                while record is not None:
                    properties.append((record.string_data(1), record.string_data(2)))
                    record = view.fetch()
            return properties

    def export_change_log(self, msi_path: str, mst_path: str, out_path: str) -> int:
        """
        Write the raw change log of mst_path applied to msi_path to Parquet.

        Returns the number of rows written. Unlike diff, view-mode failures
        propagate since there is nothing to export.
        """
        if not os.path.isfile(mst_path):
            raise TransformNotFound(mst_path)
        with self.open_base(msi_path, OpenMode(self.config.transform_open_mode)) as db:
            db.apply_transform_view(mst_path)
            records = self._capture(db)
        count = write_change_log(records, out_path)
        logger.info("Exported %d change-log rows to %s", count, out_path)
        return count

    def _capture(self, db: InstallerDatabase) -> List[ChangeRecord]:
        return list(read_change_log(db, self.config.change_log_table))

    def _warn(self, report: DiffReport, message: str):
        self._warning_count += 1
        report.warnings.append(message)
        logger.warning(message)

    def get_stats(self):
        return {
            "diff_count": self._diff_count,
            "warning_count": self._warning_count,
            "driver": self._driver.name if self._driver else None,
        }
