"""Configuration management for WTK."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from ..logging_config import logger
from .errors import ConfigError

LOCAL_CONFIG_NAME = ".wtk.yaml"

DEFAULT_CONFIG = {
    "version": 1,
    "workspace": {
        "common": [
            "SOUL.md",
            "USER.md",
            "AGENTS.md",
            "MEMORY.md",
            "HEARTBEAT.md",
            "TOOLS.md",
            "IDENTITY.md",
        ],
        "exclude": ["README.md", "CHANGELOG.md", "LICENSE.md", "*.backup", "*.compressed.md"],
    },
    "compression": {
        "recommend_threshold": 30,
        "block_templates": None,  # Shipped table when unset
    },
    "analysis": {
        "sessions_per_week": 7,
        "calls_per_session": 20,
        "avg_session_tokens": 150000,
        "avg_output_tokens": 15000,
        "current_model": "anthropic/claude-opus-4-5",
        "savings_model": "anthropic/claude-sonnet-4-20250514",
    },
    "pricing": {
        # USD per million tokens
        "models": {
            "anthropic/claude-opus-4-5": {
                "label": "Claude Opus",
                "input": 15,
                "output": 75,
                "tier": "premium",
            },
            "anthropic/claude-sonnet-4-20250514": {
                "label": "Claude Sonnet",
                "input": 3,
                "output": 15,
                "tier": "standard",
            },
            "google/gemini-2.5-pro": {
                "label": "Gemini Pro",
                "input": 1.25,
                "output": 10,
                "tier": "budget",
            },
            "ollama/llama3.1": {
                "label": "Llama 3.1 (local)",
                "input": 0,
                "output": 0,
                "tier": "free",
            },
        },
    },
    "logging": {
        "level": "WARNING",
    },
}


class Config:
    """Configuration manager for WTK."""

    def __init__(self, config_path: Path | None = None, workspace: Path | None = None):
        self.config_dir = Path.home() / ".config" / "wtk"
        self.config_path = config_path or (self.config_dir / "config.yaml")
        self.workspace = workspace
        self._config: dict[str, Any] = {}
        self.load()

    @property
    def local_config_path(self) -> Path | None:
        """Workspace-level override file, if a workspace is set."""
        if self.workspace is None:
            return None
        return self.workspace / LOCAL_CONFIG_NAME

    def load(self) -> dict[str, Any]:
        """Load configuration from file, then the workspace override."""
        self._config = self._merge(DEFAULT_CONFIG, self._read(self.config_path))

        local_path = self.local_config_path
        if local_path is not None:
            self._config = self._merge(self._config, self._read(local_path))

        return self._config

    def save(self) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w") as f:
            yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved configuration to {self.config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key."""
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-notation key."""
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def as_dict(self) -> dict[str, Any]:
        """Return a copy of the merged configuration."""
        return copy.deepcopy(self._config)

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        """Read a YAML mapping, empty when the file does not exist."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        logger.debug(f"Loaded configuration from {path}")
        return data

    def _merge(self, base: dict, override: dict) -> dict:
        """Recursively merge two dictionaries."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
