"""Configuration management with file persistence and change callbacks."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Dict, Any, Callable, List

from .models.config import SystemConfig
from .config.defaults import DEFAULT_PATHS, IMAGE_SERVICES, REPOSITORIES
from .logging_config import get_logger

logger = get_logger("config_manager")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigManager:
    """Manages system configuration stored in a JSON file."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[SystemConfig] = None
        self._config_change_callbacks: List[Callable[[SystemConfig], None]] = []

        self.load_config()

    def load_config(self) -> SystemConfig:
        """Load configuration from file or create default."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                self._config = SystemConfig(**config_dict)
            except (json.JSONDecodeError, TypeError) as e:
                logger.error(f"Error loading config: {e}. Using defaults.")
                self._config = SystemConfig()
        else:
            self._config = SystemConfig()
            self.save_config()

        return self._config

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(self.export_config(), f, indent=2)

    def get_config(self) -> SystemConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values; unknown keys are ignored."""
        config = self.get_config()

        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Ignoring unknown config key: {key}")

        self.save_config()
        self._notify_callbacks()

    def validate_config(self, config: Optional[SystemConfig] = None) -> bool:
        """Validate the given configuration, or the current one."""
        config = config or self._config
        if config is None:
            return False

        try:
            return self._check_config(config)
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Invalid config value: {e}")
            return False

    def _check_config(self, config: SystemConfig) -> bool:
        if not 0.0 <= config.confidence_threshold <= 1.0:
            return False

        if config.image_service not in IMAGE_SERVICES:
            return False

        if config.repository not in REPOSITORIES:
            return False

        if config.repository == "json" and not config.data_file:
            return False

        if not 0 < config.web_port < 65536:
            return False

        if config.event_history_size < 1:
            return False

        if config.log_level.upper() not in LOG_LEVELS:
            return False

        return True

    def register_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Register a callback to be called when config changes."""
        if callback not in self._config_change_callbacks:
            self._config_change_callbacks.append(callback)

    def unregister_change_callback(self, callback: Callable[[SystemConfig], None]) -> None:
        """Unregister a config change callback."""
        if callback in self._config_change_callbacks:
            self._config_change_callbacks.remove(callback)

    def _notify_callbacks(self) -> None:
        for callback in self._config_change_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = SystemConfig()
        self.save_config()
        self._notify_callbacks()

    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        if not self._config:
            return {}
        return asdict(self._config)

    def import_config(self, config_dict: Dict[str, Any]) -> bool:
        """
        Import configuration from a dictionary.

        Args:
            config_dict: Dictionary containing configuration values

        Returns:
            True if import was successful, False otherwise
        """
        known = {f.name for f in fields(SystemConfig)}
        unknown = set(config_dict) - known
        if unknown:
            logger.error(f"Error importing config: unknown keys {sorted(unknown)}")
            return False

        try:
            new_config = SystemConfig(**config_dict)
        except TypeError as e:
            logger.error(f"Error importing config: {e}")
            return False

        if not self.validate_config(new_config):
            return False

        self._config = new_config
        self.save_config()
        self._notify_callbacks()
        return True
