"""Application configuration."""
import logging
import os
from dataclasses import dataclass

# Redmine refuses pages larger than this
MAX_PAGE_SIZE = 100

logger = logging.getLogger(__name__)


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back to default when unset or invalid."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default


@dataclass
class RedmineApiConfig:
    """Redmine API configuration."""

    base_url: str = "http://localhost:3000"
    api_key: str = ""  # Read from env or user input
    timeout: int = 60
    page_size: int = 25

    def __post_init__(self):
        """Keep page size inside what the server accepts."""
        self.base_url = self.base_url.rstrip("/")
        self.page_size = max(1, min(self.page_size, MAX_PAGE_SIZE))

    @classmethod
    def from_env(cls) -> "RedmineApiConfig":
        """Load config from environment variables."""
        return cls(
            base_url=os.getenv("REDMINE_URL", "http://localhost:3000"),
            api_key=os.getenv("REDMINE_API_KEY", ""),
            timeout=_int_env("REDMINE_TIMEOUT", 60),
            page_size=_int_env("REDMINE_PAGE_SIZE", 25),
        )


@dataclass
class AppConfig:
    """Application configuration."""

    log_level: str = "WARNING"
    redmine_api: RedmineApiConfig = None

    def __post_init__(self):
        """Initialize default values."""
        if self.redmine_api is None:
            self.redmine_api = RedmineApiConfig.from_env()

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load config from environment variables."""
        return cls(
            log_level=os.getenv("REDMINE_LOG_LEVEL", "WARNING").upper(),
            redmine_api=RedmineApiConfig.from_env(),
        )


# Global instance
app_config = AppConfig.from_env()
