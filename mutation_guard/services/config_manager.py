"""
Configuration Manager - Handle mutation guard settings persistence
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "MUTATION_GUARD_CONFIG_DIR"
PROJECT_ROOT_ENV = "MUTATION_GUARD_PROJECT_ROOT"


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self, config_dir: str | Path | None = None):
        # 1st: explicit argument / environment, 2nd: ~/.mutation_guard
        config_dir = config_dir or os.environ.get(CONFIG_DIR_ENV) or os.path.expanduser("~/.mutation_guard")

        config_path = Path(config_dir)
        try:
            config_path.mkdir(parents=True, exist_ok=True)
            self._config_file = config_path / "config.json"
        except OSError as e:
            logger.warning("Cannot write to %s: %s", config_dir, e)
            self._config_file = None

        # Fallback: temp directory
        if not self._config_file:
            tmp_dir = Path(tempfile.gettempdir()) / "mutation_guard"
            tmp_dir.mkdir(parents=True, exist_ok=True)
            self._config_file = tmp_dir / "config.json"
            logger.warning("Using temporary config path: %s", self._config_file)

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        config = self._default_config()
        if self._config_file.exists():
            try:
                with open(self._config_file, encoding="utf-8") as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError) as e:
                logger.error("Error loading config %s: %s", self._config_file, e)

        # Environment override for the project root
        if os.environ.get(PROJECT_ROOT_ENV):
            config["project_root"] = os.environ[PROJECT_ROOT_ENV]
        return config

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "project_root": os.getcwd(),
            "policy_file": None,  # None = look for sdd.yaml / sdd.yml / sdd.json
            "snapshot_dir": ".mutation_guard/snapshots",  # relative to project_root
            "validate_before_write": True,
            "snapshot_keep": 0,  # 0 = keep every snapshot
            "log_level": "INFO",
            "server": {"host": "127.0.0.1", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return self._config.copy()

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)
