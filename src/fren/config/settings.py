"""
Host runtime settings for the Fren core.

These are the host's own knobs (where state lives, how to log, provider
timeouts and models), not the user's AI provider Configuration record.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..core.exceptions import SettingsError
from ..providers.base import ProviderSettings


logger = logging.getLogger(__name__)


_TRUE_VALUES = ("1", "true", "yes", "on")


class FrenSettings:
    """
    Settings for a Fren host.

    Loads an optional YAML settings file, then applies environment overrides.
    """

    def __init__(self, settings_path: Optional[Path] = None):
        """
        Initialize settings.

        Args:
            settings_path: Path to YAML settings file (optional)
        """
        self.settings_path = Path(settings_path) if settings_path else None
        self.config = self._default_config()
        if self.settings_path:
            self._merge(self.config, self._load_config())
        self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load settings from YAML file."""
        if not self.settings_path.exists():
            raise SettingsError(f"Settings file not found: {self.settings_path}")

        logger.info(f"Loading settings from: {self.settings_path}")

        try:
            with open(self.settings_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid settings file {self.settings_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise SettingsError(f"Settings file {self.settings_path} must contain a mapping")
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Return default settings."""
        return {
            "state": {
                "backend": "memory",
                "path": None,
            },
            "logging": {
                "level": "INFO",
                "structured": False,
            },
            "provider": {
                "timeout_seconds": 120,
                "chat_model": None,
                "embedding_model": None,
            },
        }

    @classmethod
    def _merge(cls, base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
        """Recursively merge ``overrides`` into ``base``."""
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                cls._merge(base[key], value)
            else:
                base[key] = value

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides to loaded settings."""
        env = os.environ
        state = self.config.setdefault("state", {})
        log = self.config.setdefault("logging", {})
        provider = self.config.setdefault("provider", {})

        if env.get("FREN_STATE_BACKEND"):
            state["backend"] = env["FREN_STATE_BACKEND"]
        if env.get("FREN_STATE_PATH"):
            state["path"] = env["FREN_STATE_PATH"]
        if env.get("FREN_LOG_LEVEL"):
            log["level"] = env["FREN_LOG_LEVEL"]
        if env.get("FREN_LOG_STRUCTURED"):
            log["structured"] = env["FREN_LOG_STRUCTURED"].lower() in _TRUE_VALUES
        if env.get("FREN_PROVIDER_TIMEOUT_SECONDS"):
            provider["timeout_seconds"] = env["FREN_PROVIDER_TIMEOUT_SECONDS"]
        if env.get("FREN_CHAT_MODEL"):
            provider["chat_model"] = env["FREN_CHAT_MODEL"]
        if env.get("FREN_EMBEDDING_MODEL"):
            provider["embedding_model"] = env["FREN_EMBEDDING_MODEL"]

    def get_state_config(self) -> Dict[str, Any]:
        """Get state backend settings."""
        return self.config.get("state", {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging settings."""
        return self.config.get("logging", {})

    def is_structured_logging(self) -> bool:
        """Whether JSON log lines are requested; YAML strings like "false" are parsed."""
        value = self.get("logging.structured", False)
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_VALUES
        return bool(value)

    def get_log_level(self) -> int:
        """Resolve the configured log level name to a logging level."""
        name = str(self.get("logging.level", "INFO")).upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise SettingsError(f"Unknown log level: {name}")
        return level

    def get_provider_settings(self) -> ProviderSettings:
        """Build provider adapter settings."""
        provider = self.config.get("provider", {})
        try:
            timeout = int(provider.get("timeout_seconds", 120))
        except (TypeError, ValueError) as e:
            raise SettingsError(f"provider.timeout_seconds must be an integer: {e}") from e

        return ProviderSettings(
            timeout_seconds=timeout,
            chat_model=provider.get("chat_model"),
            embedding_model=provider.get("embedding_model"),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a settings value by dotted key, e.g. ``state.backend``."""
        keys = key.split(".")
        value = self.config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default
