"""
main.py - Command line entry point for the transform diff extractor

    transform-diff product.msi custom.mst
    transform-diff product.msi custom.mst --verbose --export changes.parquet
    transform-diff product.msi                  # list the base Property table
"""
import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

from transform_diff.config import DRIVERS, LOG_LEVELS, OUTPUT_FORMATS, ConfigManager, TransformDiffConfig
from transform_diff.controller import TransformDiffController
from transform_diff.errors import TransformDiffError
from transform_diff.report.text_report import render_json, render_properties, render_text
from transform_diff.util.arrow_utils import write_change_log

logger = logging.getLogger("transform_diff")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transform-diff",
        description="Report the Property table changes an installer transform makes to a base database.",
    )
    parser.add_argument("msi_path", metavar="MSI_PATH", help="base installer database")
    parser.add_argument(
        "mst_path", metavar="MST_PATH", nargs="?", default=None,
        help="transform to inspect; without it the base Property table is listed",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="include the full change-log dump")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None, dest="output_format")
    parser.add_argument("--export", metavar="PATH", default=None,
                        help="also write the change log to a Parquet file")
    parser.add_argument("--driver", choices=DRIVERS, default=None)
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None, type=str.upper)
    return parser


def resolve_config(args: argparse.Namespace, base: Optional[TransformDiffConfig] = None) -> TransformDiffConfig:
    """Environment configuration overridden by command line flags"""
    config = base or ConfigManager().load_config("env")
    overrides = {
        "driver": args.driver,
        "output_format": args.output_format,
        "include_change_log": args.verbose,
        "log_level": args.log_level,
    }
    config = dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
    config.validate()
    return config


def run(argv: Optional[List[str]] = None, config: Optional[TransformDiffConfig] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args, config)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=getattr(logging, config.log_level), format="%(levelname)s %(name)s: %(message)s")
    controller = TransformDiffController(config)

    try:
        if args.mst_path is None:
            properties = controller.read_properties(args.msi_path)
            print(render_properties(args.msi_path, properties))
            return 0

        keep_log = config.include_change_log or bool(args.export)
        report = controller.diff(args.msi_path, args.mst_path, include_change_log=keep_log)

        if args.export:
            if report.degraded or report.records is None:
                logger.warning("Skipping export to %s: no change log available", args.export)
            else:
                count = write_change_log(report.records, args.export)
                logger.info("Exported %d change-log rows to %s", count, args.export)
        if not config.include_change_log:
            report.records = None

        if config.output_format == "json":
            print(render_json(report))
        else:
            print(render_text(report, config.absent_value_label))
    except TransformDiffError as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (ImportError, OSError) as e:
        logger.debug("Driver unavailable", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
