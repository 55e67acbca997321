"""
Example usage of transform_diff with the offline DuckDB driver.

Run create_database.py first.
"""
import os
import json
from transform_diff.config import TransformDiffConfig
from transform_diff.controller import TransformDiffController
from transform_diff.report.text_report import render_text

def main():
    here = os.path.dirname(__file__)
    db_path = os.path.join(here, "product.duckdb")
    log_path = os.path.join(here, "custom.parquet")

    print(f"Base database: {db_path}")
    print(f"Transform:     {log_path}")

    controller = TransformDiffController(TransformDiffConfig(driver="duckdb"))

    # Inspection only: the base Property table
    for name, value in controller.read_properties(db_path):
        print(f"  {name} = {value}")

    report = controller.diff(db_path, log_path, include_change_log=True)

    print()
    print(render_text(report))

    print("\nAs JSON:")
    print(json.dumps(report.to_dict(), indent=2))

if __name__ == "__main__":
    main()
