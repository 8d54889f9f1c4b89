"""Unit tests for Settings class and get_settings function."""

from collections.abc import Callable
from pathlib import Path

import pytest
from pydantic import ValidationError

from squadron.config import get_settings, reload_settings
from squadron.config.models.lifecycle import LifecycleConfig
from squadron.config.settings import Settings, set_toml_config


@pytest.fixture(autouse=True)
def empty_toml_config() -> None:
    set_toml_config({})


class TestSettings:
    """Tests for Settings model."""

    def test_default_values(self) -> None:
        settings = Settings()
        assert settings.app_name == "squadron"
        assert settings.debug is False
        assert settings.storage.backend == "inmemory"

    def test_lifecycle_defaults(self) -> None:
        settings = Settings()
        assert settings.lifecycle.built_in_wins_on_tie is True
        assert settings.lifecycle.bulk_max_concurrency == 5
        assert settings.lifecycle.default_actor == "system"

    def test_provisioning_defaults(self) -> None:
        settings = Settings()
        assert settings.provisioning.backend == "http"
        assert settings.provisioning.api_key_env == "VAPI_API_KEY"
        assert settings.provisioning.create_timeout_seconds == 30.0

    def test_nested_env_override(self, env_override) -> None:
        with env_override({"SQUADRON_LIFECYCLE__BULK_MAX_CONCURRENCY": "12"}):
            settings = Settings()
        assert settings.lifecycle.bulk_max_concurrency == 12

    def test_concurrency_bounds(self) -> None:
        with pytest.raises(ValidationError):
            LifecycleConfig(bulk_max_concurrency=0)


class TestGetSettings:
    """Tests for get_settings caching."""

    def test_loads_toml_and_caches(
        self,
        test_config_dir: Path,
        mock_toml_files: Callable[[dict[str, str]], None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": '[lifecycle]\ndefault_actor = "release-bot"'})
        monkeypatch.setenv("SQUADRON_CONFIG_DIR", str(test_config_dir))

        first = get_settings()

        assert first.lifecycle.default_actor == "release-bot"
        assert get_settings() is first

    def test_reload_picks_up_changes(
        self,
        test_config_dir: Path,
        mock_toml_files: Callable[[dict[str, str]], None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        mock_toml_files({"default.toml": "debug = false"})
        monkeypatch.setenv("SQUADRON_CONFIG_DIR", str(test_config_dir))
        assert get_settings().debug is False

        mock_toml_files({"default.toml": "debug = true"})

        assert reload_settings().debug is True
