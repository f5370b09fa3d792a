"""Configuration loader for the story registry

All configurable values come from config/config.yaml.
No magic numbers in code - everything is configurable.

Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

Usage:
    from src.config import load_config, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    config = get_validated_config()
    fee = config.registry.mint_fee
"""

from __future__ import annotations

from pathlib import Path

from .config_schema import AppConfig, load_validated_config


# Global config instance
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"


def load_config(config_path: str | None = None) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to config/config.yaml.

    Returns:
        The validated AppConfig, also cached for get_validated_config().

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _validated_config

    path: Path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    _validated_config = load_validated_config(path)
    return _validated_config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Loads default config if not already loaded.
    """
    if _validated_config is None:
        return load_config()
    return _validated_config


def reset_config() -> None:
    """Forget loaded config so the next access reloads. Mainly for tests."""
    global _validated_config
    _validated_config = None
