"""Pytest fixtures for story registry tests."""

from __future__ import annotations

from typing import Any

import pytest

from src.config_schema import RegistryConfig
from src.registry.logger import EventLogger
from src.registry.story_registry import StoryRegistry

MINTER = "ST1TEST"
VERIFIER = "ST2TEST"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "feature(name): mark test as belonging to a feature. "
        "Usage: @pytest.mark.feature('minting')"
    )


@pytest.fixture
def story_hash() -> bytes:
    """A valid 32-byte story digest."""
    return bytes([1]) * 32


@pytest.fixture
def mint_args(story_hash: bytes) -> dict[str, Any]:
    """Valid keyword arguments for StoryRegistry.mint."""
    return {
        "story_hash": story_hash,
        "art_uri": "ipfs://art",
        "metadata": "Test metadata",
        "recovery_goal": "Recovery goal",
        "milestone_count": 5,
        "currency": "STX",
        "location": "LocationX",
        "group_id": None,
    }


@pytest.fixture
def registry_config() -> RegistryConfig:
    return RegistryConfig()


@pytest.fixture
def event_logger() -> EventLogger:
    return EventLogger()


@pytest.fixture
def registry(registry_config: RegistryConfig, event_logger: EventLogger) -> StoryRegistry:
    """Fresh registry with default parameters and no verifier."""
    return StoryRegistry(config=registry_config, event_logger=event_logger)


@pytest.fixture
def verified_registry(registry: StoryRegistry) -> StoryRegistry:
    """Registry with VERIFIER registered."""
    assert registry.register_verifier(MINTER, 0, VERIFIER)["success"]
    return registry


@pytest.fixture
def minted_registry(verified_registry: StoryRegistry, mint_args: dict[str, Any]) -> StoryRegistry:
    """Registry holding token 0, minted by MINTER at height 1."""
    result = verified_registry.mint(MINTER, 1, **mint_args)
    assert result == {"success": True, "value": 0}
    return verified_registry
