"""Core configuration for the insights CLI."""

from insights_cli.core.config import (
    COLORS,
    MAX_ERROR_LENGTH,
    Settings,
    console,
    settings,
)

__all__ = [
    "COLORS",
    "MAX_ERROR_LENGTH",
    "Settings",
    "console",
    "settings",
]
