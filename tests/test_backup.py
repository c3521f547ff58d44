"""Tests for backups and persistent mode."""

from pathlib import Path

import pytest

from wtk.core.backup import (
    PERSISTENT_INSTRUCTION,
    PERSISTENT_MARKER,
    BackupManager,
    backup_path_for,
    split_persistent_section,
)
from wtk.core.errors import BackupNotFound


@pytest.fixture
def backups(workspace: Path) -> BackupManager:
    return BackupManager(workspace)


class TestBackup:
    """Tests for backup and restore."""

    def test_backup_path(self):
        assert backup_path_for(Path("/ws/USER.md")) == Path("/ws/USER.md.backup")

    def test_backup_copies(self, workspace, backups):
        path = workspace / "USER.md"
        path.write_text("original")
        target = backups.backup(path)
        assert target.read_text() == "original"
        assert backups.has_backup(path)

    def test_existing_backup_kept(self, workspace, backups):
        """A second backup must not overwrite the true original."""
        path = workspace / "USER.md"
        path.write_text("original")
        backups.backup(path)
        path.write_text("compressed")
        backups.backup(path)
        assert backup_path_for(path).read_text() == "original"

    def test_discard(self, workspace, backups):
        path = workspace / "USER.md"
        path.write_text("original")
        backups.backup(path)
        backups.discard(path)
        assert not backups.has_backup(path)

    def test_list_backups(self, workspace, backups):
        for name in ("USER.md", "SOUL.md"):
            (workspace / name).write_text(name)
            backups.backup(workspace / name)
        assert [p.name for p in backups.list_backups()] == ["SOUL.md.backup", "USER.md.backup"]

    def test_list_backups_missing_workspace(self, tmp_path):
        assert BackupManager(tmp_path / "missing").list_backups() == []

    def test_restore_all(self, workspace, backups):
        for name in ("USER.md", "SOUL.md"):
            path = workspace / name
            path.write_text("original " + name)
            backups.backup(path)
            path.write_text("compressed")

        assert backups.restore() == ["SOUL.md", "USER.md"]
        assert (workspace / "USER.md").read_text() == "original USER.md"
        assert (workspace / "SOUL.md").read_text() == "original SOUL.md"
        assert backups.list_backups() == []

    def test_restore_one(self, workspace, backups):
        for name in ("USER.md", "SOUL.md"):
            path = workspace / name
            path.write_text("original")
            backups.backup(path)
            path.write_text("compressed")

        assert backups.restore("USER.md") == ["USER.md"]
        assert (workspace / "USER.md").read_text() == "original"
        assert (workspace / "SOUL.md").read_text() == "compressed"
        assert backups.has_backup(workspace / "SOUL.md")

    def test_restore_missing(self, backups):
        with pytest.raises(BackupNotFound, match="USER.md.backup"):
            backups.restore("USER.md")

    def test_restore_nothing(self, backups):
        assert backups.restore() == []


class TestPersistentMode:
    """Tests for the AGENTS.md persistent-mode section."""

    def test_no_agents_file(self, backups):
        assert not backups.enable_persistent_mode()
        assert not backups.persistent_mode_enabled()

    def test_enable(self, workspace, backups):
        agents = workspace / "AGENTS.md"
        agents.write_text("# Agents\nBe helpful.\n")
        assert backups.enable_persistent_mode()
        assert backups.persistent_mode_enabled()
        assert agents.read_text().startswith("# Agents\nBe helpful.\n")
        assert backups.has_backup(agents)

    def test_enable_twice(self, workspace, backups):
        agents = workspace / "AGENTS.md"
        agents.write_text("# Agents\n")
        backups.enable_persistent_mode()
        assert not backups.enable_persistent_mode()
        assert agents.read_text().count(PERSISTENT_MARKER) == 1

    def test_disable(self, workspace, backups):
        agents = workspace / "AGENTS.md"
        agents.write_text("# Agents\nBe helpful.\n")
        backups.enable_persistent_mode()
        assert backups.disable_persistent_mode()
        assert agents.read_text() == "# Agents\nBe helpful.\n"
        assert not backups.persistent_mode_enabled()

    def test_disable_when_off(self, workspace, backups):
        (workspace / "AGENTS.md").write_text("# Agents\n")
        assert not backups.disable_persistent_mode()

    def test_disable_after_heading_demoted(self, workspace, backups):
        """A rewritten heading level still strips the whole line."""
        agents = workspace / "AGENTS.md"
        demoted = PERSISTENT_INSTRUCTION.replace("## 📝", "### 📝")
        agents.write_text("# Agents\nBe helpful.\n" + demoted)
        assert backups.persistent_mode_enabled()
        assert backups.disable_persistent_mode()
        assert agents.read_text() == "# Agents\nBe helpful.\n"

    def test_marker_inside_a_line_is_not_a_section(self, workspace, backups):
        (workspace / "AGENTS.md").write_text(f"See `{PERSISTENT_MARKER}` in the docs.\n")
        assert not backups.persistent_mode_enabled()


class TestSplitPersistentSection:
    def test_no_section(self):
        assert split_persistent_section("# Agents\n") == ("# Agents\n", "")

    def test_split_at_heading_line(self):
        body, section = split_persistent_section("# Agents\n" + PERSISTENT_INSTRUCTION)
        assert body == "# Agents\n\n"
        assert section == PERSISTENT_INSTRUCTION.lstrip("\n")
