"""Integration tests for the bytescope command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from bytescope import __version__
from bytescope.adapters.cli import main as cli_main
from bytescope.adapters.cli.main import app
from bytescope.application.pipeline import PipelineCoordinator
from bytescope.infrastructure.config.config_loader import ENV_OVERRIDES

from tests.conftest import build_tree, expected_counts

runner = CliRunner()

# Wide terminal so long temporary paths are not wrapped
ENV = {"COLUMNS": "250"}


@pytest.fixture
def workspace(temp_dir, monkeypatch):
    """Run commands from an empty directory with no config or env overrides."""
    monkeypatch.chdir(temp_dir)
    monkeypatch.setenv("HOME", str(temp_dir / "home"))
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    return temp_dir


@pytest.mark.integration
class TestScanCommand:
    """Test suite for `bytescope scan`."""

    def test_json_export(self, workspace):
        files = build_tree(workspace / "tree", {"a.txt": "abc", "sub/b.bin": b"\x00\xff"})
        out = workspace / "out"

        result = runner.invoke(
            app,
            ["scan", str(workspace / "tree"), "--format", "json",
             "--output-dir", str(out), "--workers", "2", "--queue-capacity", "1"],
            env=ENV,
        )

        assert result.exit_code == 0, result.output
        document = json.loads((out / "histogram.json").read_text())
        assert document["counts"] == expected_counts(*files.values())
        assert document["stats"]["workers"] == 2

    def test_console_and_png(self, workspace):
        build_tree(workspace / "tree", {"hello.txt": "hello world\n"})
        out = workspace / "charts"

        result = runner.invoke(
            app,
            ["scan", str(workspace / "tree"), "-f", "console", "-f", "png", "-o", str(out)],
            env=ENV,
        )

        assert result.exit_code == 0, result.output
        assert "Histogram Complete" in result.output
        assert "Total bytes: 12" in result.output
        assert (out / "barchart_0.png").is_file()
        assert (out / "barchart_1.png").is_file()

    def test_exclude_option(self, workspace):
        build_tree(workspace / "tree", {"keep.txt": "k", "drop.log": "dddd"})
        out = workspace / "out"

        result = runner.invoke(
            app,
            ["scan", str(workspace / "tree"), "-f", "json", "-o", str(out), "-e", "*.log"],
            env=ENV,
        )

        assert result.exit_code == 0, result.output
        assert json.loads((out / "histogram.json").read_text())["total_bytes"] == 1

    def test_missing_root_exits_with_error(self, workspace):
        result = runner.invoke(
            app, ["scan", str(workspace / "missing"), "-f", "json"], env=ENV
        )

        assert result.exit_code == 1
        assert "Cannot scan root directory" in result.output
        assert not (workspace / "histogram.json").exists()

    def test_root_from_config_file(self, workspace):
        build_tree(workspace / "configured", {"x": "xx"})
        config_file = workspace / "custom.yaml"
        config_file.write_text(
            f"pipeline:\n  root_directory: {workspace / 'configured'}\n"
            f"output:\n  formats: [json]\n  output_directory: {workspace / 'out'}\n"
        )

        result = runner.invoke(app, ["scan", "--config", str(config_file)], env=ENV)

        assert result.exit_code == 0, result.output
        assert json.loads((workspace / "out" / "histogram.json").read_text())["total_bytes"] == 2

    def test_invalid_format_is_a_configuration_error(self, workspace):
        build_tree(workspace / "tree", {"x": "x"})

        result = runner.invoke(app, ["scan", str(workspace / "tree"), "-f", "svg"], env=ENV)

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_renderer_failure_exits_with_error(self, workspace):
        build_tree(workspace / "tree", {"x": "x"})
        blocker = workspace / "blocker"
        blocker.write_text("not a directory")

        result = runner.invoke(
            app, ["scan", str(workspace / "tree"), "-f", "json", "-o", str(blocker)], env=ENV
        )

        assert result.exit_code == 1
        assert "Renderer 'json' failed" in result.output

    def test_interrupt_exits_130(self, workspace, monkeypatch):
        build_tree(workspace / "tree", {"x": "x"})

        def interrupted(self):
            raise KeyboardInterrupt()

        monkeypatch.setattr(PipelineCoordinator, "run", interrupted)

        result = runner.invoke(app, ["scan", str(workspace / "tree"), "-f", "json"], env=ENV)

        assert result.exit_code == 130
        assert "cancelled" in result.output


@pytest.mark.integration
class TestConfigAndInfoCommands:
    """Test suite for `bytescope config` and `bytescope info`."""

    def test_config_init_and_show(self, workspace):
        target = workspace / "bytescope.yaml"

        created = runner.invoke(app, ["config", "--init", "--path", str(target)], env=ENV)
        shown = runner.invoke(app, ["config", "--show", "--path", str(target)], env=ENV)

        assert created.exit_code == 0, created.output
        assert target.is_file()
        assert shown.exit_code == 0, shown.output
        assert "worker_count: 4" in shown.output

    def test_config_init_refuses_overwrite(self, workspace):
        target = workspace / "bytescope.yaml"
        target.write_text("{}\n")

        result = runner.invoke(app, ["config", "--init", "--path", str(target)], env=ENV)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_config_init_unwritable_path(self, workspace):
        blocker = workspace / "blocker"
        blocker.write_text("not a directory")

        result = runner.invoke(
            app, ["config", "--init", "--path", str(blocker / "b.yaml")], env=ENV
        )

        assert result.exit_code == 1
        assert "Cannot write configuration file" in result.output

    def test_config_lists_locations(self, workspace):
        result = runner.invoke(app, ["config"], env=ENV)

        assert result.exit_code == 0
        assert "No configuration files found" in result.output
        assert "Default Locations" in result.output

    def test_info(self, workspace):
        result = runner.invoke(app, ["info"], env=ENV)

        assert result.exit_code == 0, result.output
        assert __version__ in result.output
        assert "Queue capacity: 4" in result.output


class TestMainEntryPoint:
    """Test suite for the console script wrapper."""

    def test_keyboard_interrupt(self, monkeypatch):
        def interrupted():
            raise KeyboardInterrupt()

        monkeypatch.setattr(cli_main, "app", interrupted)

        with pytest.raises(SystemExit) as exc_info:
            cli_main.main()

        assert exc_info.value.code == 130
