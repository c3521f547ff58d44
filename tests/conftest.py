"""Shared fixtures for WTK tests."""

from pathlib import Path

import pytest
from loguru import logger

from wtk.core.config import Config


@pytest.fixture(autouse=True)
def _quiet_logging():
    """Keep loguru sinks from outliving a test's captured streams."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """An empty workspace directory."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path, workspace: Path) -> Config:
    """Default configuration that never reads the user's home directory."""
    return Config(config_path=tmp_path / "config.yaml", workspace=workspace)
