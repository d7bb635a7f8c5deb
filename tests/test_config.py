"""Tests for appwritectl.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from appwritectl.core.config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_TIMEOUT,
    Config,
    Profile,
    get_api_key,
)
from appwritectl.core.exceptions import ConfigurationError, ProfileNotFoundError

ENV_VARS = (
    "APPWRITE_ENDPOINT",
    "APPWRITE_PROJECT",
    "APPWRITE_KEY",
    "APPWRITE_PROFILE",
    "APPWRITE_SELF_SIGNED",
    "APPWRITE_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Profile Tests
# =============================================================================


class TestProfile:
    """Tests for Profile dataclass."""

    def test_default_values(self):
        profile = Profile(endpoint="https://cloud.appwrite.io/v1")
        assert profile.project_id is None
        assert profile.self_signed is False
        assert profile.timeout == DEFAULT_TIMEOUT
        assert profile.chunk_size == DEFAULT_CHUNK_SIZE

    def test_default_chunk_size_is_5mb(self):
        assert DEFAULT_CHUNK_SIZE == 5 * 1024 * 1024

    def test_round_trip_dict(self):
        profile = Profile(
            endpoint="https://appwrite.example.org/v1",
            project_id="demo",
            self_signed=True,
            timeout=60,
            chunk_size=1024,
        )
        assert Profile.from_dict(profile.to_dict()) == profile

    def test_from_dict_defaults(self):
        profile = Profile.from_dict({"endpoint": "https://appwrite.example.org/v1"})
        assert profile.timeout == DEFAULT_TIMEOUT
        assert profile.chunk_size == DEFAULT_CHUNK_SIZE


# =============================================================================
# Config Tests
# =============================================================================


class TestConfigLoad:
    """Tests for loading configuration."""

    def test_missing_file_gives_empty_config(self, temp_dir: Path):
        config = Config.load(temp_dir / "missing.yaml")
        assert config.profiles == {}
        assert config.default_profile == "default"

    def test_load_from_file(self, temp_dir: Path, sample_config_yaml: str):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)

        config = Config.load(path)

        assert config.default_profile == "test"
        assert set(config.profiles) == {"test", "production"}
        test = config.get_profile()
        assert test.endpoint == "https://appwrite-test.example.org/v1"
        assert test.project_id == "demo"
        assert test.self_signed is True
        assert test.chunk_size == 1024
        assert config.get_profile("production").timeout == 60

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("profiles: [unclosed")

        with pytest.raises(ConfigurationError, match="Failed to load config"):
            Config.load(path)

    def test_env_endpoint_overrides_default_profile(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setenv("APPWRITE_ENDPOINT", "https://env.example.org/v1")
        monkeypatch.setenv("APPWRITE_PROJECT", "envproj")
        monkeypatch.setenv("APPWRITE_SELF_SIGNED", "yes")
        monkeypatch.setenv("APPWRITE_TIMEOUT", "90")

        config = Config.load(temp_dir / "missing.yaml")
        profile = config.get_profile("default")

        assert profile.endpoint == "https://env.example.org/v1"
        assert profile.project_id == "envproj"
        assert profile.self_signed is True
        assert profile.timeout == 90

    def test_env_invalid_timeout(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APPWRITE_ENDPOINT", "https://env.example.org/v1")
        monkeypatch.setenv("APPWRITE_TIMEOUT", "soon")

        with pytest.raises(ConfigurationError):
            Config.load(temp_dir / "missing.yaml")

    def test_env_project_applies_to_default_profile(
        self, temp_dir: Path, sample_config_yaml: str, monkeypatch: pytest.MonkeyPatch
    ):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)
        monkeypatch.setenv("APPWRITE_PROJECT", "override")

        config = Config.load(path)

        assert config.get_profile("test").project_id == "override"
        assert config.get_profile("production").project_id == "prod"

    def test_env_profile_selects_default(
        self, temp_dir: Path, sample_config_yaml: str, monkeypatch: pytest.MonkeyPatch
    ):
        path = temp_dir / "config.yaml"
        path.write_text(sample_config_yaml)
        monkeypatch.setenv("APPWRITE_PROFILE", "production")

        assert Config.load(path).default_profile == "production"


class TestConfigSave:
    """Tests for saving configuration."""

    def test_save_and_reload(self, temp_dir: Path):
        path = temp_dir / "nested" / "config.yaml"
        config = Config()
        config.add_profile("dev", "https://dev.example.org/v1", project_id="p1", chunk_size=2048)
        config.set_default_profile("dev")

        config.save(path)
        reloaded = Config.load(path)

        assert reloaded.default_profile == "dev"
        assert reloaded.get_profile("dev") == config.get_profile("dev")

    def test_save_never_writes_api_key(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APPWRITE_KEY", "secret-key")
        path = temp_dir / "config.yaml"
        config = Config()
        config.add_profile("default", "https://dev.example.org/v1")

        config.save(path)

        assert "secret-key" not in path.read_text()
        assert "api_key" not in yaml.safe_load(path.read_text())["profiles"]["default"]


class TestProfiles:
    """Tests for profile management."""

    def test_get_missing_profile(self):
        with pytest.raises(ProfileNotFoundError):
            Config().get_profile("nope")

    def test_set_default_missing_profile(self):
        with pytest.raises(ProfileNotFoundError):
            Config().set_default_profile("nope")

    def test_has_profile(self):
        config = Config()
        config.add_profile("a", "https://a.example.org/v1")
        assert config.has_profile("a")
        assert not config.has_profile("b")


class TestApiKey:
    """Tests for API key lookup."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("APPWRITE_KEY", "k")
        assert get_api_key() == "k"

    def test_not_set(self):
        assert get_api_key() is None
