"""Configuration management for appwritectl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from appwritectl.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "appwritectl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TIMEOUT = 30
DEFAULT_CHUNK_SIZE = 5 * 1024 * 1024  # 5MB, the server's maximum chunk

# Environment variable names
ENV_ENDPOINT = "APPWRITE_ENDPOINT"
ENV_PROJECT = "APPWRITE_PROJECT"
ENV_KEY = "APPWRITE_KEY"
ENV_PROFILE = "APPWRITE_PROFILE"
ENV_SELF_SIGNED = "APPWRITE_SELF_SIGNED"
ENV_TIMEOUT = "APPWRITE_TIMEOUT"

TRUTHY = ("true", "1", "yes")


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for one Appwrite endpoint and project."""

    endpoint: str
    project_id: Optional[str] = None
    self_signed: bool = False
    timeout: int = DEFAULT_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "endpoint": self.endpoint,
            "project_id": self.project_id,
            "self_signed": self.self_signed,
            "timeout": self.timeout,
            "chunk_size": self.chunk_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            endpoint=data.get("endpoint", ""),
            project_id=data.get("project_id"),
            self_signed=data.get("self_signed", False),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            chunk_size=data.get("chunk_size", DEFAULT_CHUNK_SIZE),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        if endpoint := os.getenv(ENV_ENDPOINT):
            self_signed = os.getenv(ENV_SELF_SIGNED, "false").lower() in TRUTHY
            try:
                timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_TIMEOUT)))
            except ValueError as e:
                raise ConfigurationError(
                    "Invalid timeout in environment", field=ENV_TIMEOUT
                ) from e

            config.profiles["default"] = Profile(
                endpoint=endpoint,
                project_id=os.getenv(ENV_PROJECT),
                self_signed=self_signed,
                timeout=timeout,
            )
        elif (project := os.getenv(ENV_PROJECT)) and config.default_profile in config.profiles:
            config.profiles[config.default_profile].project_id = project

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file (the API key is never written).

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        endpoint: str,
        project_id: Optional[str] = None,
        self_signed: bool = False,
        timeout: int = DEFAULT_TIMEOUT,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Profile:
        """Add or update a profile."""
        profile = Profile(
            endpoint=endpoint,
            project_id=project_id,
            self_signed=self_signed,
            timeout=timeout,
            chunk_size=chunk_size,
        )
        self.profiles[name] = profile
        return profile

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_api_key() -> Optional[str]:
    """Get the API key from the environment.

    Returns:
        Key if set, None otherwise.
    """
    return os.getenv(ENV_KEY)
