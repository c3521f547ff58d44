"""Exceptions raised by WTK collaborators.

The compression engine itself never raises for string input; these cover
file access, pricing lookups, backups and configuration.
"""

from __future__ import annotations

from pathlib import Path


class WtkError(Exception):
    """Base exception for all WTK errors."""


class SourceUnavailable(WtkError):
    """Raised when a workspace file is missing or unreadable."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Could not read {self.path.name}: {reason}")


class UnknownPricingModel(WtkError):
    """Raised when a model id is required but missing from the pricing catalog."""

    def __init__(self, model_id: str):
        self.model_id = model_id
        super().__init__(f"Unknown model: {model_id}")


class BackupNotFound(WtkError):
    """Raised when reverting a file that has no backup."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Backup not found: {target}.backup")


class ConfigError(WtkError):
    """Raised for configuration-related problems."""
