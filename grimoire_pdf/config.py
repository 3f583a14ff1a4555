#!/usr/bin/env python3
"""
Configuration management for the grimoire PDF exporter.
Supports environment variables, config file, and CLI arguments.

MIT License - Copyright (c) 2025 Grimoire PDF Exporter
"""

import os
import json
import platform
from pathlib import Path
from typing import Dict, Optional, Any

from .theme import DEFAULT_BRAND


def get_user_config_dir() -> Path:
    """Get platform-appropriate user config directory."""
    system = platform.system()

    if system == "Windows":
        config_dir = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":  # macOS
        config_dir = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        config_dir = Path.home() / ".config"

    return config_dir / "grimoire-pdf"


def get_default_db_path() -> Path:
    """Get default export state database path in user config directory."""
    return get_user_config_dir() / "export_state.db"


def load_config_file(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from config file if it exists."""
    if config_file is None:
        config_file = get_user_config_dir() / "config.json"

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
                return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError):
            return {}

    return {}


def parse_timeout_value(value: str) -> Optional[float]:
    """Parse a render timeout in seconds. Returns None for unusable values."""
    try:
        timeout = float(value.strip())
    except ValueError:
        return None
    return timeout if timeout > 0 else None


def get_config_from_env() -> Dict[str, Any]:
    """Load configuration from environment variables."""
    config = {}

    env_mapping = {
        "GRIMOIRE_PDF_SOURCE_DIR": "source_dir",
        "GRIMOIRE_PDF_OUTPUT_DIR": "output_dir",
        "GRIMOIRE_PDF_DB_PATH": "db_path",
        "GRIMOIRE_PDF_MARGINS": "page_margins",
        "GRIMOIRE_PDF_TIMEOUT": "timeout",
        "GRIMOIRE_PDF_BRAND": "brand",
    }

    for env_var, config_key in env_mapping.items():
        value = os.environ.get(env_var)
        if value:
            if config_key == "timeout":
                parsed = parse_timeout_value(value)
                if parsed is not None:
                    config[config_key] = parsed
            else:
                config[config_key] = value

    return config


class Config:
    """Configuration manager with multi-layer precedence."""

    def __init__(self, cli_args: Optional[Dict[str, Any]] = None, config_file: Optional[Path] = None):
        """Initialize configuration.

        Precedence order (highest to lowest):
        1. CLI arguments
        2. Environment variables
        3. Config file
        4. Defaults
        """
        self.cli_args = {k: v for k, v in (cli_args or {}).items() if v is not None}

        file_config = load_config_file(config_file)
        env_config = get_config_from_env()

        # Merge with precedence: CLI > ENV > FILE > DEFAULTS
        self._config = {}
        self._config.update(self._get_defaults())
        self._config.update(file_config)
        self._config.update(env_config)
        self._config.update(self.cli_args)

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return {
            "source_dir": "grimoires",
            "output_dir": "output",
            "db_path": str(get_default_db_path()),
            "page_margins": "20mm 15mm",
            "timeout": 60.0,
            "brand": DEFAULT_BRAND,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def get_source_dir(self) -> str:
        return self._config.get("source_dir", "grimoires")

    def get_output_dir(self) -> str:
        return self._config.get("output_dir", "output")

    def get_db_path(self) -> str:
        return self._config.get("db_path", str(get_default_db_path()))

    def get_page_margins(self) -> str:
        return self._config.get("page_margins", "20mm 15mm")

    def get_timeout(self) -> float:
        """Get render timeout in seconds."""
        return float(self._config.get("timeout", 60.0))

    def get_brand(self) -> str:
        return self._config.get("brand", DEFAULT_BRAND)

    def update(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values."""
        self._config.update(updates)

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary."""
        return self._config.copy()
