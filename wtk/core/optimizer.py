"""Preview and apply compression across a workspace."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..logging_config import logger
from .backup import BackupManager, split_persistent_section
from .config import Config, get_config
from .errors import SourceUnavailable
from .rewriter import CompressionResult, Rewriter, TextDocument, get_rewriter
from .workspace import discover_files, load_document, load_documents


class OutcomeStatus(str, Enum):
    COMPRESSED = "compressed"
    NO_BENEFIT = "no_benefit"
    UNAVAILABLE = "unavailable"


@dataclass
class FileOutcome:
    """What happened to one file during an optimize run."""

    filename: str
    status: OutcomeStatus
    result: CompressionResult | None = None
    error: str | None = None

    @property
    def tokens_saved(self) -> int:
        if self.status is OutcomeStatus.COMPRESSED and self.result:
            return self.result.tokens_saved
        return 0


def compressed_output_path(path: Path) -> Path:
    """``X.md`` -> ``X.compressed.md``."""
    if path.suffix == ".md":
        return path.with_name(path.stem + ".compressed.md")
    return path.with_name(path.name + ".compressed.md")


class Optimizer:
    """Runs the rewriter over workspace files."""

    def __init__(
        self,
        workspace: Path,
        config: Config | None = None,
        rewriter: Rewriter | None = None,
    ):
        self.workspace = workspace
        self.config = config or get_config()
        self.rewriter = rewriter or get_rewriter()
        self.backups = BackupManager(workspace)

    def files(self) -> list[Path]:
        return discover_files(self.workspace, self.config)

    def preview_file(self, path: Path) -> CompressionResult:
        """Compress a file in memory."""
        return self.rewriter.compress(load_document(path))

    def preview_workspace(self) -> list[CompressionResult]:
        """Compress every workspace file in memory, biggest saving first."""
        previews = []
        for _, document in load_documents(self.files()):
            if isinstance(document, SourceUnavailable):
                continue
            previews.append(self.rewriter.compress(document))
        return sorted(previews, key=lambda r: r.tokens_saved, reverse=True)

    def compress_to_file(self, path: Path, output: Path | None = None) -> tuple[CompressionResult, Path]:
        """Write a compressed copy beside the source, leaving the source alone."""
        result = self.preview_file(path)
        output = output or compressed_output_path(path)
        output.write_text(result.compressed_text, encoding="utf-8")
        logger.info(f"Wrote {output.name}")
        return result, output

    def optimize_file(self, path: Path) -> FileOutcome:
        """Compress a file in place if that makes it strictly smaller."""
        try:
            document = load_document(path)
        except SourceUnavailable as e:
            logger.warning(str(e))
            return FileOutcome(path.name, OutcomeStatus.UNAVAILABLE, error=e.reason)

        # The persistent-mode section is written verbatim, never compressed
        body, section = split_persistent_section(document.content)
        result = self.rewriter.compress(TextDocument(document.filename, body))
        if not result.is_beneficial:
            logger.debug(f"{path.name}: no compression benefit")
            return FileOutcome(path.name, OutcomeStatus.NO_BENEFIT, result=result)

        had_backup = self.backups.has_backup(path)
        self.backups.backup(path)
        try:
            path.write_text(result.compressed_text + section, encoding="utf-8")
        except OSError as e:
            if not had_backup:
                self.backups.discard(path)
            logger.warning(f"Could not write {path.name}: {e}")
            return FileOutcome(path.name, OutcomeStatus.UNAVAILABLE, result=result, error=str(e))

        return FileOutcome(path.name, OutcomeStatus.COMPRESSED, result=result)

    def optimize_workspace(self) -> list[FileOutcome]:
        """Compress every workspace file in place, backing up originals."""
        return [self.optimize_file(path) for path in self.files()]
