"""Configuration loader for system settings."""

from pathlib import Path
from typing import Any

import yaml

from .models import IntegrityConfig


class ConfigLoader:
    """Loads and validates configuration files."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the config loader.

        Args:
            config_dir: Directory containing config files. Defaults to the
                current working directory
        """
        self.config_dir = config_dir or Path.cwd()

    def load(self, config_file: str | Path) -> IntegrityConfig:
        """Load the system configuration from YAML.

        Args:
            config_file: Path to the configuration YAML file

        Returns:
            Parsed IntegrityConfig object
        """
        path = self._resolve_path(config_file)
        data = self._load_yaml(path)
        config = IntegrityConfig.from_dict(data)

        # Relative paths inside the file are relative to the file itself
        if not config.storage.uploads_dir.is_absolute():
            config.storage.uploads_dir = path.parent / config.storage.uploads_dir
        if config.scan.keywords_file and not config.scan.keywords_file.is_absolute():
            config.scan.keywords_file = path.parent / config.scan.keywords_file

        return config

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f)
