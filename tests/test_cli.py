"""Tests for CLI commands."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from wtk.cli import cli
from wtk.core.backup import PERSISTENT_MARKER

VERBOSE = "Please be very careful.\n" * 10
COMPACT = "be careful.\n" * 10


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def invoke(runner, workspace: Path, tmp_path: Path):
    """Run the CLI against the test workspace and a throwaway config file."""

    def _invoke(*args):
        base = ["-w", str(workspace), "--config", str(tmp_path / "config.yaml")]
        return runner.invoke(cli, base + list(args))

    return _invoke


@pytest.fixture
def populated(workspace: Path) -> Path:
    (workspace / "SOUL.md").write_text(VERBOSE)
    (workspace / "AGENTS.md").write_text("# Agents\nBe helpful.\n")
    return workspace


class TestCliBasics:
    """Basic CLI tests."""

    def test_version(self, runner):
        """Should show version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_help(self, runner):
        """Should show help."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "WTK" in result.output

    def test_no_command(self, invoke):
        """Should show help when no command given."""
        result = invoke()
        assert result.exit_code == 0
        assert "Usage" in result.output


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_analyze(self, invoke, populated):
        """Should list files and the monthly estimate."""
        result = invoke("analyze")
        assert result.exit_code == 0
        assert "SOUL.md" in result.output
        assert "Monthly cost estimate" in result.output
        assert "Recommendations" in result.output

    def test_analyze_empty(self, invoke):
        """Should report an empty workspace."""
        result = invoke("analyze")
        assert result.exit_code == 0
        assert "No workspace files found" in result.output

    def test_analyze_unknown_model(self, invoke, populated):
        """An unpriced model still renders, with an unknown cost."""
        (populated / ".wtk.yaml").write_text("analysis:\n  current_model: mystery/model\n")
        result = invoke("analyze")
        assert result.exit_code == 0
        assert "unknown" in result.output


class TestPreviewCommand:
    """Tests for the preview command."""

    def test_preview_all(self, invoke, populated):
        """Should show a table and leave files untouched."""
        result = invoke("preview")
        assert result.exit_code == 0
        assert "SOUL.md" in result.output
        assert (populated / "SOUL.md").read_text() == VERBOSE

    def test_preview_file(self, invoke, populated):
        """Should show before and after for one file."""
        result = invoke("preview", "SOUL.md")
        assert result.exit_code == 0
        assert "BEFORE" in result.output
        assert "Savings: 50%" in result.output

    def test_preview_missing_file(self, invoke):
        """Should fail cleanly for a missing file."""
        result = invoke("preview", "missing.md")
        assert result.exit_code == 1
        assert "Could not read missing.md" in result.output


class TestCompressCommand:
    """Tests for the compress command."""

    def test_compress(self, invoke, populated):
        """Should write a compressed sibling and keep the source."""
        result = invoke("compress", str(populated / "SOUL.md"))
        assert result.exit_code == 0
        assert "Savings:    50%" in result.output
        assert (populated / "SOUL.compressed.md").read_text() == COMPACT
        assert (populated / "SOUL.md").read_text() == VERBOSE

    def test_compress_output(self, invoke, populated, tmp_path):
        """Should honour --output."""
        out = tmp_path / "out.md"
        result = invoke("compress", str(populated / "SOUL.md"), "-o", str(out))
        assert result.exit_code == 0
        assert out.read_text() == COMPACT

    def test_compress_missing(self, invoke, workspace):
        """click rejects a path that does not exist."""
        result = invoke("compress", str(workspace / "missing.md"))
        assert result.exit_code != 0


class TestApplyRevert:
    """Tests for apply and revert."""

    def test_apply_needs_confirm(self, invoke, populated):
        """Should refuse to rewrite without --confirm."""
        result = invoke("apply")
        assert result.exit_code == 1
        assert "wtk apply --confirm" in result.output
        assert (populated / "SOUL.md").read_text() == VERBOSE

    def test_apply(self, invoke, populated):
        """Should compress in place, back up and enable persistent mode."""
        result = invoke("apply", "--confirm")
        assert result.exit_code == 0
        assert "Tokens saved: 30" in result.output
        assert "Persistent mode: ON" in result.output
        assert (populated / "SOUL.md").read_text() == COMPACT
        assert (populated / "SOUL.md.backup").read_text() == VERBOSE
        assert PERSISTENT_MARKER in (populated / "AGENTS.md").read_text()

    def test_revert(self, invoke, populated):
        """Should restore originals and turn persistent mode off."""
        invoke("apply", "--confirm")
        result = invoke("revert")
        assert result.exit_code == 0
        assert "Restored SOUL.md" in result.output
        assert (populated / "SOUL.md").read_text() == VERBOSE
        assert (populated / "AGENTS.md").read_text() == "# Agents\nBe helpful.\n"
        assert not list(populated.glob("*.backup"))

    def test_revert_one(self, invoke, populated):
        """Should restore a single named file."""
        invoke("apply", "--confirm")
        result = invoke("revert", "SOUL.md")
        assert result.exit_code == 0
        assert (populated / "SOUL.md").read_text() == VERBOSE
        assert (populated / "AGENTS.md.backup").exists()

    def test_revert_list(self, invoke, populated):
        """Should list backups without restoring."""
        invoke("apply", "--confirm")
        result = invoke("revert", "--list")
        assert result.exit_code == 0
        assert "SOUL.md" in result.output
        assert (populated / "SOUL.md").read_text() == COMPACT

    def test_apply_twice_then_revert_one(self, invoke, workspace, tmp_path):
        """Persistent mode comes off cleanly after AGENTS.md was compressed twice."""
        (tmp_path / "blocks.yaml").write_text("{}\n")
        (tmp_path / "config.yaml").write_text(f"compression:\n  block_templates: {tmp_path / 'blocks.yaml'}\n")
        (workspace / "SOUL.md").write_text(VERBOSE)
        (workspace / "AGENTS.md").write_text("Please be helpful.\n" * 5)

        assert invoke("apply", "--confirm").exit_code == 0
        assert invoke("apply", "--confirm").exit_code == 0
        assert PERSISTENT_MARKER in (workspace / "AGENTS.md").read_text()

        result = invoke("revert", "SOUL.md")
        assert result.exit_code == 0
        assert (workspace / "SOUL.md").read_text() == VERBOSE
        assert (workspace / "AGENTS.md").read_text() == "be helpful.\n" * 5

    def test_revert_nothing(self, invoke):
        """Should say so when there are no backups."""
        result = invoke("revert")
        assert result.exit_code == 0
        assert "No backups found" in result.output

    def test_revert_missing_backup(self, invoke, populated):
        """Should fail cleanly for a file without a backup."""
        result = invoke("revert", "SOUL.md")
        assert result.exit_code == 1
        assert "Backup not found" in result.output


class TestReportCommands:
    """Tests for models and dashboard."""

    def test_models(self, invoke, populated):
        """Should show the current model and the catalog."""
        result = invoke("models")
        assert result.exit_code == 0
        assert "Claude Opus" in result.output
        assert "Available models" in result.output

    def test_dashboard(self, invoke, populated):
        """Should render all sections to the console."""
        result = invoke("dashboard")
        assert result.exit_code == 0
        assert "Compression Preview" in result.output
        assert "Cost Projections" in result.output

    def test_dashboard_html(self, invoke, populated, tmp_path):
        """Should write an HTML report."""
        path = tmp_path / "dashboard.html"
        result = invoke("dashboard", "--html", str(path))
        assert result.exit_code == 0
        assert "<td>SOUL.md</td>" in path.read_text()


class TestConfigCommand:
    """Tests for the config command."""

    def test_config(self, invoke):
        """Should show the configuration summary."""
        result = invoke("config")
        assert result.exit_code == 0
        assert "Current model" in result.output

    def test_config_show(self, invoke):
        """Should dump the merged configuration."""
        result = invoke("config", "--show")
        assert result.exit_code == 0
        assert "sessions_per_week: 7" in result.output

    def test_config_init(self, invoke, tmp_path):
        """Should write the configuration file."""
        result = invoke("config", "--init")
        assert result.exit_code == 0
        assert (tmp_path / "config.yaml").exists()

    def test_bad_config(self, invoke, tmp_path):
        """A broken config file is reported, not a traceback."""
        (tmp_path / "config.yaml").write_text("analysis: [unclosed\n")
        result = invoke("analyze")
        assert result.exit_code == 1
        assert "Invalid YAML" in result.output
