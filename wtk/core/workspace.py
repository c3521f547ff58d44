"""Workspace file discovery and loading."""

from __future__ import annotations

import fnmatch
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..logging_config import logger
from .config import Config, get_config
from .errors import SourceUnavailable
from .rewriter import TextDocument

WORKSPACE_INDICATORS = [
    re.compile(r"# (SOUL|USER|AGENTS|MEMORY|HEARTBEAT|TOOLS|IDENTITY)\.md", re.IGNORECASE),
    re.compile(r"workspace.*context", re.IGNORECASE),
    re.compile(r"system.*prompt", re.IGNORECASE),
    re.compile(r"agent.*config", re.IGNORECASE),
]
CONFIG_NAME_PATTERNS = [
    re.compile(r"^[A-Z_]+\.md$", re.IGNORECASE),
    re.compile(r"config|prompt|context|instruction", re.IGNORECASE),
]
MIN_SUBSTANTIAL_CHARS = 500


def find_workspace(start: Path | None = None) -> Path:
    """Resolve the workspace root.

    When run from inside an installed skill (``<root>/skills/<name>``),
    the workspace is two levels up.
    """
    path = (start or Path.cwd()).resolve()
    if path.parent.name == "skills":
        return path.parent.parent
    return path


def is_excluded(filename: str, exclude: Iterable[str]) -> bool:
    """Check a file name against exact names and glob patterns."""
    return any(fnmatch.fnmatchcase(filename, pattern) for pattern in exclude)


def looks_like_workspace_file(path: Path, known_files: Iterable[str]) -> bool:
    """Decide whether a markdown file belongs in the agent's context."""
    if path.name in known_files:
        return True

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False

    if any(pattern.search(content) for pattern in WORKSPACE_INDICATORS):
        return True

    is_substantial = len(content) > MIN_SUBSTANTIAL_CHARS
    looks_like_config = any(pattern.search(path.name) for pattern in CONFIG_NAME_PATTERNS)
    return is_substantial and looks_like_config


def discover_files(workspace: Path, config: Config | None = None) -> list[Path]:
    """Find the markdown context files at the top of a workspace.

    Known workspace files come first, in their configured order; any other
    matches follow alphabetically.
    """
    config = config or get_config()
    known_files = config.get("workspace.common", [])
    exclude = config.get("workspace.exclude", [])

    try:
        entries = sorted(workspace.iterdir())
    except OSError as e:
        logger.warning(f"Could not scan workspace {workspace}: {e}")
        return []

    files = []
    for path in entries:
        if not path.is_file() or path.suffix != ".md":
            continue
        if is_excluded(path.name, exclude):
            logger.debug(f"Skipping excluded file {path.name}")
            continue
        if looks_like_workspace_file(path, known_files):
            files.append(path)

    priority = {name: i for i, name in enumerate(known_files)}
    files.sort(key=lambda p: (priority.get(p.name, len(priority)), p.name))
    return files


def load_document(path: Path) -> TextDocument:
    """Read a file into a TextDocument."""
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SourceUnavailable(path, "file not found") from e
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnavailable(path, str(e)) from e
    return TextDocument(filename=path.name, content=content)


def load_documents(
    paths: Iterable[Path],
) -> Iterator[tuple[Path, TextDocument | SourceUnavailable]]:
    """Load each file, yielding the error in place of an unreadable one."""
    for path in paths:
        try:
            yield path, load_document(path)
        except SourceUnavailable as e:
            logger.warning(str(e))
            yield path, e
