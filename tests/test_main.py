"""Tests for the command-line entry point."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from sqlinventory.config.models import InventoryConfig, OutputMode
from sqlinventory.main import InventoryApp, build_config, collect_targets, main, parse_args
from sqlinventory.models.records import CollectionRun
from sqlinventory.report.exporter import ExportError


def test_collect_targets_order(tmp_path):
    servers_file = tmp_path / "servers.txt"
    servers_file.write_text("FILE01\nFILE02\n")
    config = InventoryConfig(targets=["CONF01"])

    targets = collect_targets(config, ["CLI01"], str(servers_file))

    assert targets == ["CONF01", "FILE01", "FILE02", "CLI01"]


def test_collect_targets_requires_one():
    with pytest.raises(ValueError, match="No targets"):
        collect_targets(InventoryConfig())


def test_collect_targets_keeps_duplicates():
    assert collect_targets(InventoryConfig(), ["SQL01", "SQL01"]) == ["SQL01", "SQL01"]


def test_build_config_overrides(tmp_path):
    args = parse_args([
        "--servers", "SQL01",
        "--output-mode", "csv",
        "--output-dir", str(tmp_path),
        "--max-workers", "4",
        "--no-host-facts",
    ])

    config = build_config(args)

    assert config.output.mode == OutputMode.CSV
    assert config.output.directory == str(tmp_path)
    assert config.collection.max_workers == 4
    assert config.host_facts.enabled is False


def test_invalid_output_mode_is_fatal():
    with patch("sqlinventory.main.InventoryApp") as mock_app:
        assert main(["--servers", "SQL01", "--output-mode", "Xml"]) == 1
        mock_app.assert_not_called()


def test_main_fails_before_collection_without_targets(tmp_path):
    with patch("sqlinventory.main.InventoryApp") as mock_app:
        assert main(["--output-dir", str(tmp_path)]) == 1
        mock_app.assert_not_called()


def test_main_fails_on_unreadable_target_file(tmp_path):
    with patch("sqlinventory.main.InventoryApp") as mock_app:
        assert main(["--servers-file", str(tmp_path / "missing.txt")]) == 1
        mock_app.assert_not_called()


def test_main_runs_app_and_prints_summary(tmp_path, capsys, run_started_at):
    with patch("sqlinventory.main.InventoryApp") as mock_app:
        mock_app.return_value.run.return_value = CollectionRun(started_at=run_started_at)

        assert main(["--servers", "SQL01", "SQL02\\INST1", "--output-dir", str(tmp_path)]) == 0

        mock_app.return_value.run.assert_called_once_with(["SQL01", "SQL02\\INST1"])
    assert "Targets: 0 total" in capsys.readouterr().out


def test_app_writes_transcript_and_survives_export_failure(tmp_path, logger, run_started_at):
    config = InventoryConfig(output={"directory": str(tmp_path), "mode": "Json"}, host_facts={"enabled": False})
    app = InventoryApp(config, logger)
    run = CollectionRun(started_at=run_started_at)
    app.aggregator = MagicMock()
    app.aggregator.run_sync.return_value = run
    app.exporter = MagicMock()
    app.exporter.export.side_effect = ExportError("disk full")

    result = app.run(["SQL01"])

    assert result is run
    transcripts = list(tmp_path.glob("SQLInventory_*.log"))
    assert len(transcripts) == 1
    assert "SQL Server inventory" in transcripts[0].read_text(encoding="utf-8")
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)


def test_app_registry_without_host_facts(logger):
    app = InventoryApp(InventoryConfig(host_facts={"enabled": False}), logger)

    names = [c.name for c in app.categories]
    assert "os" not in names and "spns" not in names
    assert names[0] == "sql_core"


def test_log_level_default_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert parse_args(["--servers", "SQL01"]).log_level == "DEBUG"


def test_main_unwritable_output_dir_exits_cleanly(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    assert main(["--servers", "SQL01", "--no-host-facts", "--output-dir", str(blocker)]) == 1


def test_app_warns_when_ssh_library_missing():
    logger = MagicMock()

    with patch("sqlinventory.main.SSHHelper.is_available", return_value=False):
        InventoryApp(InventoryConfig(), logger)

    messages = [c.args[0] for c in logger.warning.call_args_list]
    assert any("paramiko" in m for m in messages)
