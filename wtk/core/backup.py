"""Backups, revert and persistent mode for workspace files."""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from ..logging_config import logger
from .errors import BackupNotFound

BACKUP_SUFFIX = ".backup"
AGENTS_FILE = "AGENTS.md"
PERSISTENT_MARKER = "## 📝 Token Saver — Persistent Mode"
# Matches the heading at any level, in case a rewrite demoted it
PERSISTENT_HEADING = re.compile(r"^#+ 📝 Token Saver — Persistent Mode", re.MULTILINE)

PERSISTENT_INSTRUCTION = f"""
{PERSISTENT_MARKER}
**Status: ENABLED** — Turn off with `wtk revert`

When writing to workspace .md files (MEMORY.md, USER.md, TOOLS.md, SOUL.md, etc.),
always use AI-efficient notation:
- Dense key:value format over verbose paragraphs
- Symbols over words (→, +, |, &)
- Abbreviations over full phrases
- One-liners over multi-line explanations
- Preserve all meaning, minimize all tokens

**Example:** Instead of writing "The user prefers brief morning updates
with a review of tasks and any urgent items", write:
`MORNING: greeting → review(todos+pending+urgent)`

This keeps workspace files lean so they cost less on every API call.
"""


def backup_path_for(path: Path) -> Path:
    """Sibling backup path: ``X.md`` -> ``X.md.backup``."""
    return path.with_name(path.name + BACKUP_SUFFIX)


def split_persistent_section(text: str) -> tuple[str, str]:
    """Split text into the body and the persistent-mode section (empty if absent).

    The section runs from the start of its heading line to the end of the text.
    """
    match = PERSISTENT_HEADING.search(text)
    if match is None:
        return text, ""
    return text[: match.start()], text[match.start() :]


class BackupManager:
    """Copies originals aside before rewriting and restores them on request."""

    def __init__(self, workspace: Path):
        self.workspace = workspace

    def backup(self, path: Path) -> Path:
        """Back up a file, keeping an existing backup untouched.

        The first backup is the true original; later runs must not replace
        it with an already-compressed copy.
        """
        target = backup_path_for(path)
        if target.exists():
            logger.debug(f"Backup already exists for {path.name}")
            return target
        shutil.copy2(path, target)
        logger.info(f"Backed up {path.name}")
        return target

    def discard(self, path: Path) -> None:
        """Remove the backup of a file that ended up unchanged."""
        target = backup_path_for(path)
        if target.exists():
            target.unlink()
            logger.debug(f"Discarded backup for {path.name}")

    def has_backup(self, path: Path) -> bool:
        return backup_path_for(path).exists()

    def list_backups(self) -> list[Path]:
        """All backup files in the workspace."""
        if not self.workspace.is_dir():
            return []
        return sorted(
            p for p in self.workspace.iterdir() if p.is_file() and p.name.endswith(BACKUP_SUFFIX)
        )

    def restore(self, target: str = "all") -> list[str]:
        """Restore originals from their backups and remove the backups.

        Args:
            target: "all", or the name of one file to restore

        Returns:
            Names of the restored files
        """
        if target == "all":
            backups = self.list_backups()
        else:
            backup = backup_path_for(self.workspace / target)
            if not backup.exists():
                raise BackupNotFound(target)
            backups = [backup]

        restored = []
        for backup in backups:
            original = backup.with_name(backup.name[: -len(BACKUP_SUFFIX)])
            shutil.copy2(backup, original)
            backup.unlink()
            restored.append(original.name)
            logger.info(f"Restored {original.name}")

        return restored

    # ==================== Persistent Mode ====================

    @property
    def agents_path(self) -> Path:
        return self.workspace / AGENTS_FILE

    def persistent_mode_enabled(self) -> bool:
        if not self.agents_path.exists():
            return False
        return bool(split_persistent_section(self.agents_path.read_text(encoding="utf-8"))[1])

    def enable_persistent_mode(self) -> bool:
        """Append the compact-notation instruction to AGENTS.md.

        Returns:
            True if the instruction was added, False if the file is missing
            or the instruction is already there
        """
        if not self.agents_path.exists() or self.persistent_mode_enabled():
            return False

        self.backup(self.agents_path)
        with open(self.agents_path, "a", encoding="utf-8") as f:
            f.write(PERSISTENT_INSTRUCTION)
        logger.info("Persistent mode enabled")
        return True

    def disable_persistent_mode(self) -> bool:
        """Strip the persistent-mode section from AGENTS.md."""
        if not self.persistent_mode_enabled():
            return False

        body, _ = split_persistent_section(self.agents_path.read_text(encoding="utf-8"))
        self.agents_path.write_text(body.rstrip() + "\n", encoding="utf-8")
        logger.info("Persistent mode disabled")
        return True
