"""Configuration, constants, and settings for the insights CLI."""

import os
from dataclasses import dataclass
from pathlib import Path

import dotenv
import structlog
from rich.console import Console

from insights_cli.api.constants import DEFAULT_BASE_URL

dotenv.load_dotenv()

logger = structlog.get_logger(__name__)

# Color scheme
COLORS = {
    "primary": "#10b981",
    "content": "default",
    "cursor": "#10b981",
    "dim": "#6b7280",
    "error": "red",
    "placeholder": "#a78bfa",
}

# Maximum error message length for display
MAX_ERROR_LENGTH = 500

# Rich console instance (respects NO_COLOR environment variable)
console = Console(highlight=False, no_color="NO_COLOR" in os.environ)


def _parse_timeout(raw: str | None) -> float | None:
    """Parse a positive number of seconds, ignoring anything else."""
    if not raw or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("invalid_stall_timeout", value=raw)
        return None
    return value if value > 0 else None


@dataclass
class Settings:
    """Global settings and environment detection for insights-cli.

    Attributes:
        api_url: Media-tracker API base URL
        api_token: Bearer token for the API, if available
        stall_timeout: Seconds without stream data before giving up (None waits forever)
    """

    api_url: str
    api_token: str | None
    stall_timeout: float | None = None

    @classmethod
    def from_environment(cls) -> "Settings":
        """Create settings from environment variables (and .env).

        Returns:
            Settings instance with detected configuration
        """
        return cls(
            api_url=os.environ.get("INSIGHTS_API_URL", DEFAULT_BASE_URL).rstrip("/"),
            api_token=os.environ.get("INSIGHTS_TOKEN") or None,
            stall_timeout=_parse_timeout(os.environ.get("INSIGHTS_STALL_TIMEOUT")),
        )

    @property
    def has_token(self) -> bool:
        """Check if an API token is configured."""
        return bool(self.api_token)

    @property
    def log_dir(self) -> Path:
        """Directory for per-run log files.

        Returns:
            Path to ~/.insights-cli/logs
        """
        return Path.home() / ".insights-cli" / "logs"


# Global settings instance (initialized once)
settings = Settings.from_environment()
