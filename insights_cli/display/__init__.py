"""Display formatting and live rendering for the CLI."""

from insights_cli.display.rendering import (
    render_content,
    render_error,
    render_loading,
    render_placeholder,
    render_state,
    truncate_error,
)
from insights_cli.display.view import InsightsView, PlainStreamPrinter

__all__ = [
    "InsightsView",
    "PlainStreamPrinter",
    "render_content",
    "render_error",
    "render_loading",
    "render_placeholder",
    "render_state",
    "truncate_error",
]
