"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

import dirsize.cli as cli
from dirsize.cli import main
from dirsize.models.scan_result import DirSizeResult, SubdirSizesResult

pytestmark = pytest.mark.usefixtures("isolate_settings")


@pytest.fixture
def runner():
    return CliRunner()


class TestScanCommand:
    def test_human_output(self, runner, scenario_tree):
        result = runner.invoke(main, ["scan", str(scenario_tree), "--depth", "0"])
        assert result.exit_code == 0, result.output
        assert "Total Size: 150 B" in result.output
        lines = [line.split() for line in result.output.splitlines() if line.startswith(("sub", "empty"))]
        assert lines == [["sub", "50", "B"], ["empty", "0", "B"]]

    def test_no_subs(self, runner, scenario_tree):
        result = runner.invoke(main, ["scan", str(scenario_tree), "--no-subs"])
        assert result.exit_code == 0
        assert "Subfolder sizes" not in result.output

    def test_json(self, runner, scenario_tree):
        result = runner.invoke(main, ["scan", str(scenario_tree), "--depth", "0", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total_bytes"] == 150
        sizes = {d["path"]: d["total_bytes"] for d in data["directories"]}
        assert sizes == {str(scenario_tree): 150, str(scenario_tree / "sub"): 50, str(scenario_tree / "empty"): 0}
        assert data["errors"] == []

    def test_exclude(self, runner, scenario_tree):
        result = runner.invoke(main, ["scan", str(scenario_tree), "-x", "sub", "--json"])
        assert json.loads(result.output)["total_bytes"] == 100

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", str(tmp_path / "nope")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_partial_failure_warns(self, runner, scenario_tree, deny_listing, monkeypatch):
        monkeypatch.setattr("dirsize.cli.is_elevated", lambda: False)
        deny_listing.add(scenario_tree / "sub")

        result = runner.invoke(main, ["scan", str(scenario_tree)])
        assert result.exit_code == 0
        assert "Total Size: 100 B" in result.output
        assert "couldn't be accessed" in result.output
        assert "--elevate" in result.output

    def test_elevate_rescans(self, runner, scenario_tree, deny_listing, monkeypatch):
        deny_listing.add(scenario_tree / "sub")
        monkeypatch.setattr("dirsize.cli.is_elevated", lambda: False)
        calls = []

        def fake_privileged_scan(root, depth, exclude, one_file_system):
            calls.append((root, depth, exclude, one_file_system))
            return SubdirSizesResult(
                root=root,
                max_depth=depth,
                entries=[DirSizeResult(root, 150), DirSizeResult(root / "sub", 50)],
                total_bytes=150,
            )

        monkeypatch.setattr("dirsize.cli.run_privileged_scan", fake_privileged_scan)
        result = runner.invoke(main, ["scan", str(scenario_tree), "--elevate", "--one-file-system", "--json"])

        assert result.exit_code == 0
        assert calls == [(scenario_tree, 1, (), True)]
        assert json.loads(result.output)["total_bytes"] == 150

    def test_depth_from_settings(self, runner, deep_tree):
        runner.invoke(main, ["config", "set", "scan.depth", "2"])
        result = runner.invoke(main, ["scan", str(deep_tree), "--json"])
        data = json.loads(result.output)
        assert data["max_depth"] == 2
        paths = {d["path"] for d in data["directories"]}
        assert str(deep_tree / "a" / "b" / "c") in paths
        assert str(deep_tree / "a" / "b" / "c" / "d") not in paths

    def test_invalid_depth_setting_falls_back(self, runner, deep_tree, isolate_settings):
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(json.dumps({"scan": {"depth": "deep"}}))
        result = runner.invoke(main, ["scan", str(deep_tree), "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output)["max_depth"] == 1


class TestTotalCommand:
    def test_total(self, runner, scenario_tree):
        result = runner.invoke(main, ["total", str(scenario_tree)])
        assert result.exit_code == 0
        assert result.output.startswith("150 B\t")

    def test_total_json(self, runner, scenario_tree):
        result = runner.invoke(main, ["total", str(scenario_tree), "--json"])
        assert json.loads(result.output)["total_bytes"] == 150

    def test_total_bad_root(self, runner, scenario_tree):
        result = runner.invoke(main, ["total", str(scenario_tree / "a.txt")])
        assert result.exit_code == 1
        assert "not a directory" in result.output


class TestScanAsRoot:
    def test_reads_request_from_stdin(self, runner, scenario_tree):
        request = json.dumps({"root": str(scenario_tree), "max_depth": 0})
        result = runner.invoke(main, ["scan-as-root"], input=request)
        assert result.exit_code == 0
        assert json.loads(result.output)["total_bytes"] == 150

    def test_one_file_system_honoured(self, runner, scenario_tree, monkeypatch):
        built = []
        real_build = cli._build_aggregator

        def recording_build(exclude, one_file_system):
            built.append((exclude, one_file_system))
            return real_build(exclude, one_file_system)

        monkeypatch.setattr(cli, "_build_aggregator", recording_build)
        request = json.dumps({"root": str(scenario_tree), "max_depth": 0, "exclude": ["*.tmp"], "one_file_system": True})
        result = runner.invoke(main, ["scan-as-root"], input=request)
        assert result.exit_code == 0
        assert built == [(("*.tmp",), True)]

    def test_bad_input(self, runner):
        result = runner.invoke(main, ["scan-as-root"], input="garbage")
        assert result.exit_code == 1
        assert "Bad input" in result.output


class TestConfigCommand:
    def test_set_and_get(self, runner, isolate_settings):
        result = runner.invoke(main, ["config", "set", "scan.exclude", '["*.iso"]'])
        assert result.exit_code == 0
        assert json.loads(isolate_settings.read_text())["scan"]["exclude"] == ["*.iso"]

        result = runner.invoke(main, ["config", "get", "scan.exclude"])
        assert json.loads(result.output) == ["*.iso"]

    def test_get_default(self, runner):
        result = runner.invoke(main, ["config", "get", "display.error_limit"])
        assert result.output.strip() == "3"
