"""
Configuration management for Pagesmith.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage all settings and makes it easy to
modify behavior without changing code.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional
import logging


class ConfigManager:
    """
    Manages configuration loading and access for Pagesmith.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            if not isinstance(loaded, dict):
                raise ValueError(f"Configuration root must be a mapping, got {type(loaded).__name__}")

            self._config = loaded
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError, ValueError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "ai": {
                "host": "http://localhost:11434",
                "model": "gemma3",
                "timeout": 60.0,
                "prompts": {}
            },
            "storage": {
                "filename": "pagesmith.db"
            },
            "autosave": {
                "enabled": True,
                "delay_ms": 1000
            },
            "workspace": {
                "id": "default_workspace",
                "user": "local"
            },
            "paths": {
                "log_file": "pagesmith.log"
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "ai.model")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("ai.model")  # Returns "gemma3"
            config.get("autosave.delay_ms")  # Returns 1000
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def ai_host(self) -> str:
        """Get the generation service URL."""
        return self.get("ai.host", "http://localhost:11434")

    @property
    def model_name(self) -> str:
        """Get AI model name."""
        return self.get("ai.model", "gemma3")

    @property
    def ai_timeout(self) -> float:
        """Get the generation request timeout in seconds."""
        return float(self.get("ai.timeout", 60.0))

    @property
    def database_filename(self) -> str:
        """Get database filename."""
        return self.get("storage.filename", "pagesmith.db")

    @property
    def log_filename(self) -> str:
        """Get log file name."""
        return self.get("paths.log_file", "pagesmith.log")

    @property
    def autosave_delay(self) -> float:
        """Get the autosave quiet period in seconds."""
        return self.get("autosave.delay_ms", 1000) / 1000.0

    @property
    def autosave_enabled(self) -> bool:
        """Whether edits are written back automatically."""
        return bool(self.get("autosave.enabled", True))

    @property
    def workspace_id(self) -> str:
        """Get the workspace new pages are created in."""
        return self.get("workspace.id", "default_workspace")

    @property
    def default_user(self) -> str:
        """Get the user id recorded on pages created locally."""
        return self.get("workspace.user", "local")

    @property
    def prompt_overrides(self) -> Dict[str, Any]:
        """Get per-generation-type prompt overrides."""
        return self.get("ai.prompts", {}) or {}

    def get_prompt_override(self, generation_type: str) -> Optional[Dict[str, Any]]:
        """
        Get the prompt override for one generation type.

        Args:
            generation_type: Name of the generation type (e.g. "title")

        Returns:
            Override dictionary or None if not configured
        """
        return self.prompt_overrides.get(generation_type)


# Global configuration instance
config = ConfigManager()
