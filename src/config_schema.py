"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from src.config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# REGISTRY MODELS
# =============================================================================

class FieldLimits(StrictModel):
    """Bounds applied to token fields at mint and update time."""

    story_hash_length: int = Field(
        default=32,
        gt=0,
        description="Exact byte length of a story content digest"
    )
    art_uri_max: int = Field(default=256, gt=0, description="Max art URI length")
    metadata_max: int = Field(default=512, ge=0, description="Max metadata length")
    recovery_goal_max: int = Field(default=256, ge=0, description="Max recovery goal length")
    location_max: int = Field(default=100, ge=0, description="Max location length")
    milestone_count_min: int = Field(default=1, ge=1, description="Fewest milestones per token")
    milestone_count_max: int = Field(default=10, ge=1, description="Most milestones per token")

    @model_validator(mode="after")
    def check_milestone_range(self) -> "FieldLimits":
        if self.milestone_count_min > self.milestone_count_max:
            raise ValueError(
                f"milestone_count_min ({self.milestone_count_min}) exceeds "
                f"milestone_count_max ({self.milestone_count_max})"
            )
        return self


class RegistryConfig(StrictModel):
    """Initial parameters of a story registry.

    These seed the mutable registry settings. After start-up only the
    gated setters change mint_fee and royalty_rate.
    """

    max_tokens: int = Field(
        default=10000,
        ge=0,
        description="Supply cap - no token id at or above this is ever issued"
    )
    mint_fee: int = Field(
        default=500,
        ge=0,
        description="Amount charged to the minter, paid to the verifier"
    )
    royalty_rate: int = Field(
        default=10,
        ge=0,
        description="Default royalty percentage snapshotted onto new tokens"
    )
    max_royalty_rate: int = Field(
        default=20,
        ge=0,
        le=100,
        description="Highest royalty percentage the setter accepts"
    )
    owner_index_cap: int = Field(
        default=100,
        gt=0,
        description="Most token ids kept in one owner's index list"
    )
    currencies: list[str] = Field(
        default_factory=lambda: ["STX", "BTC", "USD"],
        min_length=1,
        description="Currency codes a token may be denominated in"
    )
    limits: FieldLimits = Field(default_factory=FieldLimits)

    @field_validator("currencies")
    @classmethod
    def check_currencies(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"currencies contains duplicates: {v}")
        return v

    @model_validator(mode="after")
    def check_royalty_rate(self) -> "RegistryConfig":
        if self.royalty_rate > self.max_royalty_rate:
            raise ValueError(
                f"royalty_rate ({self.royalty_rate}) exceeds "
                f"max_royalty_rate ({self.max_royalty_rate})"
            )
        return self


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level for the standard library logger"
    )
    events_file: str | None = Field(
        default=None,
        description="JSONL file for registry events (None = in-memory only)"
    )
    default_recent: int = Field(
        default=50,
        gt=0,
        description="Default number of recent events to return"
    )
    buffer_size: int = Field(
        default=1000,
        gt=0,
        description="Events kept in memory for reads"
    )


# =============================================================================
# ROOT CONFIG MODEL
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model for the entire application.

    All fields have sensible defaults, so an empty config file is valid.
    """

    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Args:
        config_dict: Configuration as a dictionary.

    Returns:
        Validated AppConfig instance.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "AppConfig",
    "RegistryConfig",
    "FieldLimits",
    "LoggingConfig",
    "StrictModel",
    "load_validated_config",
    "validate_config_dict",
]
