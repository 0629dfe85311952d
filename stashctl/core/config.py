"""Configuration management for stashctl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from stashctl.core.exceptions import ConfigurationError, ProfileNotFoundError
from stashctl.core.timeouts import (
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_TRANSFER_TIMEOUT_SECONDS,
)
from stashctl.core.validation import validate_timeout

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "stashctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_API_URL = "https://app.buildstash.com/api/v1"

# Environment variable names
ENV_URL = "STASH_URL"
ENV_API_KEY = "STASH_API_KEY"
ENV_PROFILE = "STASH_PROFILE"
ENV_VERIFY_SSL = "STASH_VERIFY_SSL"
ENV_TIMEOUT = "STASH_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for an artifact-service endpoint."""

    url: str = DEFAULT_API_URL
    api_key: Optional[str] = None
    verify_ssl: bool = True
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    transfer_timeout: int = DEFAULT_TRANSFER_TIMEOUT_SECONDS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "transfer_timeout": self.transfer_timeout,
        }
        if self.api_key:
            data["api_key"] = self.api_key
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url") or DEFAULT_API_URL,
            api_key=data.get("api_key"),
            verify_ssl=data.get("verify_ssl", True),
            timeout=validate_timeout(data.get("timeout")),
            transfer_timeout=validate_timeout(
                data.get("transfer_timeout"), default=DEFAULT_TRANSFER_TIMEOUT_SECONDS
            ),
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
                raise ConfigurationError(f"Failed to load config: {e}")

        # Environment variable overrides
        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            timeout = validate_timeout(os.getenv(ENV_TIMEOUT))
            existing = config.profiles.get("default")

            config.profiles["default"] = Profile(
                url=url,
                api_key=existing.api_key if existing else None,
                verify_ssl=verify_ssl,
                timeout=timeout,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

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

        When no profile has been configured at all, the default profile
        points at the public API so that an API key from the environment is
        enough to upload.

        Raises:
            ProfileNotFoundError: If a named profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            if not self.profiles and name == "default":
                return Profile()
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str = DEFAULT_API_URL,
        api_key: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
    ) -> Profile:
        """Add or update a profile."""
        profile = Profile(
            url=url,
            api_key=api_key,
            verify_ssl=verify_ssl,
            timeout=timeout,
        )
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        """Remove a profile.

        Returns:
            True if removed, False if didn't exist.
        """
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_api_key(profile: Optional[Profile] = None) -> Optional[str]:
    """Resolve the bearer token, environment first, then profile.

    Args:
        profile: Optional profile holding a stored key.

    Returns:
        API key if one is available, None otherwise.
    """
    key = os.getenv(ENV_API_KEY)
    if key and key.strip():
        return key.strip()
    if profile is not None and profile.api_key:
        return profile.api_key
    return None
