"""
Configuration Manager - Handle bridge settings persistence
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .size_gate import DEFAULT_SET_SCRIPT_MAX_LINES, get_set_script_max_lines

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "SCRIPT_BRIDGE_CONFIG_DIR"


class EditingSettings(BaseModel):
    """Typed view of the ``editing`` config section"""

    model_config = ConfigDict(strict=True)

    set_script_max_lines: int = Field(DEFAULT_SET_SCRIPT_MAX_LINES, ge=0)
    fuzz_factor: int = Field(0, ge=0)
    error_context_lines: int = Field(1, ge=0)
    normalize_line_endings: bool = True

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "EditingSettings":
        cfg = config.get("editing") or {}
        settings = cls(
            set_script_max_lines=cfg.get("setScriptMaxLines", DEFAULT_SET_SCRIPT_MAX_LINES),
            fuzz_factor=cfg.get("fuzzFactor", 0),
            error_context_lines=cfg.get("errorContextLines", 1),
            normalize_line_endings=cfg.get("normalizeLineEndings", True),
        )
        # The environment override applies only on top of a valid configured value
        max_lines = get_set_script_max_lines(settings.set_script_max_lines)
        return settings.model_copy(update={"set_script_max_lines": max_lines})


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manage configuration persistence"""

    _instance = None
    _config_file = None

    def __init__(self, config_dir: str | os.PathLike | None = None):
        # 1st: explicit argument, 2nd: environment, 3rd: ~/.script_bridge
        config_dir = config_dir or os.environ.get(CONFIG_DIR_ENV) or os.path.expanduser("~/.script_bridge")

        config_path = Path(config_dir)
        try:
            config_path.mkdir(parents=True, exist_ok=True)
            self._config_file = config_path / "config.json"
        except OSError as e:
            logger.warning("[ConfigManager] Cannot write to %s: %s", config_dir, e)

        # Last resort: temp dir
        if not self._config_file:
            tmp_dir = Path(tempfile.gettempdir()) / "script_bridge"
            tmp_dir.mkdir(parents=True, exist_ok=True)
            self._config_file = tmp_dir / "config.json"
            logger.info("[ConfigManager] Using temporary config path: %s", self._config_file)

        self._config = self._load_config()

    @classmethod
    def get_instance(cls) -> "ConfigManager":
        """Get singleton instance"""
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @property
    def config_file(self) -> Path:
        return self._config_file

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file, layered over the defaults"""
        if not self._config_file.exists():
            return self._default_config()

        try:
            with open(self._config_file) as f:
                return _merge(self._default_config(), json.load(f))
        except (json.JSONDecodeError, OSError) as e:
            logger.error("[ConfigManager] Error loading config: %s", e)
            return self._default_config()

    def _default_config(self) -> dict[str, Any]:
        """Get default configuration"""
        return {
            "hise": {
                "apiUrl": os.environ.get("HISE_API_URL", "http://localhost:1900"),
                "timeouts": {
                    "status": 3.0,  # Connectivity checks
                    "script": 30.0,  # Compilation can be slow
                },
            },
            "editing": {
                "setScriptMaxLines": DEFAULT_SET_SCRIPT_MAX_LINES,
                "fuzzFactor": 0,
                "errorContextLines": 1,
                "normalizeLineEndings": True,
            },
            "server": {"host": "0.0.0.0", "port": 8000},
        }

    def get_config(self) -> dict[str, Any]:
        """Get current configuration"""
        # Reload config from file to ensure we have the latest
        self._config = self._load_config()
        return copy.deepcopy(self._config)

    def get_editing_settings(self) -> EditingSettings:
        try:
            return EditingSettings.from_config(self.get_config())
        except ValidationError as e:
            logger.error("[ConfigManager] Invalid editing settings in %s, using defaults: %s", self._config_file, e)
            return EditingSettings.from_config({})

    def save_config(self, config: dict[str, Any]):
        """Merge config into the current settings and persist them"""
        self._config = _merge(self._config, config)

        self._config_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self._config_file, "w") as f:
                json.dump(self._config, f, indent=2)
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}")

    def get(self, key: str, default=None):
        """Get specific config value"""
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set specific config value"""
        self.save_config({key: value})
