"""
Configuration management for ipcheck.

Loads settings from environment variables or a .env file.
"""

import os
from pathlib import Path
from dataclasses import dataclass

from dotenv import load_dotenv

from ipcheck import __version__


# Check common locations for .env
ENV_LOCATIONS = [
    Path.home() / ".ipcheck" / ".env",
    Path.home() / ".config" / "ipcheck" / ".env",
    Path.cwd() / ".env",
]

DEFAULT_SOURCES_FILE = "additional_crawler_sources.json"
DEFAULT_FETCH_TIMEOUT = 10.0


def load_env_file() -> Path | None:
    """Load the first .env file found, returning its path."""
    for env_path in ENV_LOCATIONS:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


@dataclass
class Settings:
    """Runtime settings for crawler source loading."""

    # Additional crawler sources, relative to the working directory
    sources_file: str = DEFAULT_SOURCES_FILE

    # Per-source fetch timeout in seconds
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT

    user_agent: str = f"ipcheck/{__version__}"

    @property
    def sources_path(self) -> Path:
        return Path(self.sources_file)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        timeout = os.getenv("IPCHECK_FETCH_TIMEOUT", "")
        return cls(
            sources_file=os.getenv("IPCHECK_SOURCES_FILE", DEFAULT_SOURCES_FILE),
            fetch_timeout=float(timeout) if timeout else DEFAULT_FETCH_TIMEOUT,
            user_agent=os.getenv("IPCHECK_USER_AGENT", f"ipcheck/{__version__}"),
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        load_env_file()
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Set (or with None, reset) the global settings instance."""
    global _settings
    _settings = settings
