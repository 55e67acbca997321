"""
Test suite for configuration and the command line entry point
"""
import json

import pyarrow.parquet as pq
import pytest

from transform_diff.config import TransformDiffConfig, ConfigManager, get_config
from transform_diff.main import build_parser, resolve_config, run


def test_transform_diff_config_creation():
    """Test creation of TransformDiffConfig"""
    config = TransformDiffConfig()

    assert config.driver == "auto"
    assert config.transform_open_mode == "transacted"
    assert config.property_table == "Property"
    assert config.value_column == "Value"
    assert config.change_log_table == "_TransformView"
    assert config.include_change_log is False
    assert config.absent_value_label == "<absent>"


def test_transform_diff_config_validation():
    """Test configuration validation"""
    TransformDiffConfig().validate()

    with pytest.raises(ValueError) as exc_info:
        TransformDiffConfig(driver="odbc", output_format="xml").validate()
    assert "driver" in str(exc_info.value)
    assert "output_format" in str(exc_info.value)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("TRANSFORM_DIFF_DRIVER", "duckdb")
    monkeypatch.setenv("TRANSFORM_DIFF_VERBOSE", "yes")
    monkeypatch.setenv("TRANSFORM_DIFF_LOG_LEVEL", "debug")
    monkeypatch.setenv("TRANSFORM_DIFF_ABSENT_LABEL", "(none)")

    config = TransformDiffConfig.from_env()

    assert config.driver == "duckdb"
    assert config.include_change_log is True
    assert config.log_level == "DEBUG"
    assert config.absent_value_label == "(none)"
    config.validate()


def test_config_manager():
    """Test configuration manager functionality"""
    manager = ConfigManager()

    config1 = manager.get_config()
    assert isinstance(config1, TransformDiffConfig)

    config2 = manager.get_config()
    assert config1 is config2


def test_global_config():
    config = get_config()
    assert isinstance(config, TransformDiffConfig)


def test_flags_override_config():
    args = build_parser().parse_args(["product.msi", "custom.mst", "-v", "--format", "json", "--log-level", "info"])
    config = resolve_config(args, TransformDiffConfig(output_format="text"))

    assert config.include_change_log is True
    assert config.output_format == "json"
    assert config.log_level == "INFO"
    assert config.driver == "auto"


def test_run_text_report(base_db, transform_log, capsys):
    assert run([base_db, transform_log], config=TransformDiffConfig()) == 0

    out = capsys.readouterr().out
    assert "INSERT  Foo = newval" in out
    assert "MODIFY  Bar = b2 (was b1)" in out
    assert "DELETE  Baz" in out
    assert "Totals: 1 inserted, 1 modified, 1 deleted, 3 total" in out
    assert "Change log" not in out


def test_run_verbose_dump(base_db, transform_log, capsys):
    assert run([base_db, transform_log, "--verbose"], config=TransformDiffConfig()) == 0
    assert "Change log (4 rows)" in capsys.readouterr().out


def test_run_json_report(base_db, transform_log, capsys):
    assert run([base_db, transform_log, "--format", "json"], config=TransformDiffConfig()) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["summary"] == {"inserted": 1, "modified": 1, "deleted": 1, "total": 3}
    assert payload["changes"]["inserted"] == [{"operation": "INSERT", "property": "Foo", "value": "newval"}]
    assert "change_log" not in payload


def test_run_export(base_db, transform_log, tmp_path, capsys):
    out_path = str(tmp_path / "exported.parquet")
    assert run([base_db, transform_log, "--export", out_path], config=TransformDiffConfig()) == 0

    assert pq.read_table(out_path).num_rows == 4
    assert "Change log" not in capsys.readouterr().out


def test_run_missing_base_exits_nonzero(tmp_path, transform_log, capsys):
    missing = str(tmp_path / "missing.duckdb")
    assert run([missing, transform_log], config=TransformDiffConfig()) == 1

    err = capsys.readouterr().err
    assert "OpenDatabase" in err
    assert "missing.duckdb" in err


def test_run_missing_transform_exits_nonzero(base_db, tmp_path):
    assert run([base_db, str(tmp_path / "missing.parquet")], config=TransformDiffConfig()) == 1


def test_run_unsupported_transform_warns(base_db, tmp_path, capsys):
    bad = tmp_path / "custom.mst"
    bad.write_bytes(b"not a change log")

    assert run([base_db, str(bad)], config=TransformDiffConfig()) == 0

    out = capsys.readouterr().out
    assert "WARNING:" in out
    assert "Totals: 0 inserted, 0 modified, 0 deleted, 0 total" in out


def test_run_lists_properties_without_transform(base_db, capsys):
    assert run([base_db], config=TransformDiffConfig()) == 0

    out = capsys.readouterr().out
    assert "Property table (3 rows)" in out
    assert "ProductName" in out


def test_usage_error():
    with pytest.raises(SystemExit) as exc_info:
        run(["--format", "xml"])
    assert exc_info.value.code == 2
