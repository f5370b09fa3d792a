"""Unit tests for config loading and validation."""

from pathlib import Path
from typing import Iterator

import pytest
from pydantic import ValidationError

from src import config as config_module
from src.config_schema import AppConfig, RegistryConfig, load_validated_config, validate_config_dict


@pytest.fixture(autouse=True)
def fresh_config() -> Iterator[None]:
    """Each test starts and ends with nothing loaded."""
    config_module.reset_config()
    yield
    config_module.reset_config()


class TestSchema:
    def test_empty_config_is_valid(self) -> None:
        config = validate_config_dict({})

        assert config.registry.max_tokens == 10000
        assert config.registry.mint_fee == 500
        assert config.registry.royalty_rate == 10
        assert config.registry.owner_index_cap == 100
        assert config.registry.currencies == ["STX", "BTC", "USD"]
        assert config.registry.limits.story_hash_length == 32

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict({"registry": {"mint_feee": 5}})

    def test_negative_fee_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistryConfig(mint_fee=-1)

    def test_royalty_above_max_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistryConfig(royalty_rate=25)

    def test_duplicate_currencies_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegistryConfig(currencies=["STX", "STX"])

    def test_milestone_range_checked(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict(
                {"registry": {"limits": {"milestone_count_min": 5, "milestone_count_max": 2}}}
            )

    def test_bad_log_level(self) -> None:
        with pytest.raises(ValidationError):
            validate_config_dict({"logging": {"level": "LOUD"}})


class TestLoader:
    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("registry:\n  mint_fee: 42\n")

        config = load_validated_config(path)

        assert isinstance(config, AppConfig)
        assert config.registry.mint_fee == 42

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_validated_config(tmp_path / "nope.yaml")

    def test_default_file_loads(self) -> None:
        config = config_module.get_validated_config()

        assert config.registry.max_royalty_rate == 20
        assert config.registry.limits.art_uri_max == 256

    def test_load_config_path(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("registry:\n  max_tokens: 3\n")

        loaded = config_module.load_config(str(path))

        assert loaded.registry.max_tokens == 3
        assert config_module.get_validated_config() is loaded

    def test_reset_reloads_default(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("registry:\n  max_tokens: 3\n")
        config_module.load_config(str(path))

        config_module.reset_config()

        assert config_module.get_validated_config().registry.max_tokens == 10000
