"""Tests for the CLI commands using Click's CliRunner."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from src.cli.commands import kit
from src.parsers.php_parser import PhpParser

USER_RESOURCE = """<?php

namespace App\\Http\\Resources;

use Illuminate\\Http\\Resources\\Json\\JsonResource;

class UserResource extends JsonResource
{
}
"""


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner."""
    return CliRunner()


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """Create a sample Laravel project for CLI testing."""
    resources = tmp_path / "app" / "Http" / "Resources"
    resources.mkdir(parents=True)
    (resources / "UserResource.php").write_text(USER_RESOURCE)
    (resources / "Helper.php").write_text("<?php\n\nclass Helper {}\n")
    return tmp_path


@pytest.fixture
def quiet_config(tmp_path: Path) -> Path:
    """Write a config that only logs errors."""
    config_file = tmp_path / "quiet.yaml"
    config_file.write_text("logging:\n  level: ERROR\n")
    return config_file


class TestKitGroup:
    """Tests for the main command group."""

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["--help"])
        assert result.exit_code == 0
        assert "Laravel Quality Kit" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_config_file(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["--config", "/nonexistent.yaml", "rules"])
        assert result.exit_code != 0


class TestRulesCommand:
    """Tests for the 'rules' command."""

    def test_lists_enabled_rule(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["rules"])
        assert result.exit_code == 0
        assert "* add_api_resource_phpdoc" in result.output

    def test_disabled_rule_unmarked(self, runner: CliRunner, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("rules:\n  enabled: []\n")
        result = runner.invoke(kit, ["--config", str(config_file), "rules"])
        assert result.exit_code == 0
        assert "  add_api_resource_phpdoc" in result.output


class TestProcessCommand:
    """Tests for the 'process' command."""

    def test_process_help(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["process", "--help"])
        assert result.exit_code == 0
        assert "Apply the enabled rules" in result.output

    def test_dry_run_prints_diff(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "app" / "Http" / "Resources" / "UserResource.php"
        result = runner.invoke(kit, ["process", str(sample_project / "app"), "--dry-run"])
        assert result.exit_code == 0
        assert "+ * @mixin \\App\\Models\\User" in result.output
        assert "Processed 2 files, 1 would change" in result.output
        assert target.read_text() == USER_RESOURCE

    def test_process_writes(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "app" / "Http" / "Resources" / "UserResource.php"
        result = runner.invoke(kit, ["process", str(sample_project / "app")])
        assert result.exit_code == 0
        assert "Updated:" in result.output
        assert "Processed 2 files, 1 changed" in result.output
        assert "@mixin \\App\\Models\\User" in target.read_text()

    def test_default_paths(
        self,
        runner: CliRunner,
        sample_project: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.chdir(sample_project)
        result = runner.invoke(kit, ["process", "--dry-run"])
        assert result.exit_code == 0
        assert "1 would change" in result.output

    def test_no_paths_available(self, runner: CliRunner) -> None:
        with runner.isolated_filesystem():
            result = runner.invoke(kit, ["process"])
        assert result.exit_code == 2
        assert "none of the configured paths exist" in result.output

    def test_nonexistent_path(self, runner: CliRunner) -> None:
        result = runner.invoke(kit, ["process", "/nonexistent/path"])
        assert result.exit_code != 0

    def test_unknown_rule_is_usage_error(
        self, runner: CliRunner, sample_project: Path
    ) -> None:
        config_file = sample_project / "config.yaml"
        config_file.write_text("rules:\n  enabled: [missing_rule]\n")
        result = runner.invoke(
            kit, ["--config", str(config_file), "process", str(sample_project)]
        )
        assert result.exit_code == 2
        assert "Unknown rule" in result.output


class TestScanCommand:
    """Tests for the 'scan' command."""

    def test_scan_report(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(kit, ["scan", str(sample_project / "app")])
        assert result.exit_code == 0
        assert "App\\Http\\Resources\\UserResource: add_api_resource_phpdoc" in result.output
        assert "Helper: up to date" in result.output
        assert "Found 2 classes, 1 need changes" in result.output

    def test_scan_json(
        self, runner: CliRunner, sample_project: Path, quiet_config: Path
    ) -> None:
        result = runner.invoke(
            kit, ["--config", str(quiet_config), "scan", str(sample_project / "app"), "--json"]
        )
        assert result.exit_code == 0
        report = json.loads(result.output)
        by_name = {item["short_name"]: item for item in report}
        assert by_name["UserResource"]["proposed_doc_block"] == (
            "/**\n * @mixin \\App\\Models\\User\n */"
        )
        assert by_name["Helper"]["pending_rules"] == []

    def test_scan_does_not_write(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "app" / "Http" / "Resources" / "UserResource.php"
        runner.invoke(kit, ["scan", str(sample_project)])
        assert target.read_text() == USER_RESOURCE

    def test_scan_skips_unreadable_file(
        self, runner: CliRunner, sample_project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        parse_file = PhpParser.parse_file

        def fake_parse_file(self, file_path):
            if file_path.endswith("Helper.php"):
                raise PermissionError(13, "Permission denied", file_path)
            return parse_file(self, file_path)

        monkeypatch.setattr(PhpParser, "parse_file", fake_parse_file)
        result = runner.invoke(kit, ["scan", str(sample_project / "app")])
        assert result.exit_code == 0
        assert "Helper: up to date" not in result.output
        assert "Found 1 classes, 1 need changes" in result.output
