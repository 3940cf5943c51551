"""Configuration management for the compatible subkey scanner."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_TRUE_STRINGS = frozenset({"true", "yes", "on", "1"})


def parse_bool(value: Any, default: bool) -> bool:
    """Parse a boolean from a YAML value.

    Args:
        value: Raw value (bool, int, str or None).
        default: Returned when value is None.

    Returns:
        Parsed boolean.

    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


@dataclass
class ScanConfig:
    """Configuration for a key directory scan."""

    # Compare timestamps but leave every file where it is
    dry_run: bool = False

    # Create the destination directory if missing instead of failing each move
    create_destination: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the default configuration file path."""
        return Path.home() / ".config/compatible-subkeys/config.yaml"

    @classmethod
    def load(cls, config_path: Path | None = None) -> ScanConfig:
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. Uses default if None.

        Returns:
            Loaded configuration.

        Raises:
            ValueError: The file is not valid YAML or not a mapping.

        """
        if config_path is None:
            config_path = cls.get_config_path()

        if not config_path.exists():
            return cls()

        with config_path.open(encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                msg = f"Invalid YAML in {config_path}: {e}"
                raise ValueError(msg) from e

        if not isinstance(data, dict):
            msg = f"Config must be a mapping: {config_path}"
            raise ValueError(msg)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> ScanConfig:
        """Create config from dictionary."""
        config = cls()

        config.dry_run = parse_bool(data.get("dry_run"), config.dry_run)
        config.create_destination = parse_bool(
            data.get("create_destination"), config.create_destination
        )

        # Logging
        if "logging" in data:
            logging_cfg = data["logging"] or {}
            if logging_cfg.get("file"):
                config.log_file = Path(os.path.expanduser(logging_cfg["file"]))
            if "level" in logging_cfg:
                config.log_level = str(logging_cfg["level"]).upper()

        return config

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to YAML file.

        Args:
            config_path: Path to save config. Uses default if None.

        """
        if config_path is None:
            config_path = self.get_config_path()

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "dry_run": self.dry_run,
            "create_destination": self.create_destination,
            "logging": {
                "file": str(self.log_file) if self.log_file else None,
                "level": self.log_level,
            },
        }

        with config_path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
