"""Rendering of stream state for the terminal."""

from rich import box
from rich.console import RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.text import Text

from insights_cli.api.constants import PENDING_CURSOR
from insights_cli.core import COLORS, MAX_ERROR_LENGTH
from insights_cli.streaming.session import StreamState

LOADING_MESSAGE = "Generating insights..."


def truncate_error(error: str, max_length: int = MAX_ERROR_LENGTH) -> str:
    """Truncate error message for display.

    Args:
        error: The error message to truncate
        max_length: Maximum length before truncation

    Returns:
        Truncated error string with '...' if exceeded max_length
    """
    if len(error) <= max_length:
        return error
    return error[:max_length] + "..."


def render_placeholder() -> Panel:
    """Shown before the user asks for insights."""
    body = Text.assemble(
        ("Discover patterns in your collection\n", "bold"),
        ("AI will analyze your collection and share interesting observations.", COLORS["dim"]),
    )
    return Panel(
        body,
        title="AI Insights",
        border_style=COLORS["placeholder"],
        box=box.ROUNDED,
        padding=(1, 2),
    )


def render_loading(message: str = LOADING_MESSAGE) -> Spinner:
    """Skeleton shown while waiting for the first fragment."""
    return Spinner("dots", text=Text(message, style=COLORS["dim"]), style=COLORS["primary"])


def render_error(error: str) -> Text:
    """Terminal error line."""
    return Text(f"Error: {truncate_error(error)}", style=COLORS["error"])


def render_content(content: str, *, pending: bool) -> Text:
    """Accumulated text, with the pending cursor while more may arrive."""
    text = Text(content, style=COLORS["content"])
    if pending:
        text.append(PENDING_CURSOR, style=f"blink {COLORS['cursor']}")
    return text


def render_state(state: StreamState, *, activated: bool = True) -> RenderableType:
    """Pick the renderable for a stream state.

    Args:
        state: Session state snapshot
        activated: False before the user asked for insights

    Returns:
        Placeholder, error, loading skeleton or content
    """
    if not activated:
        return render_placeholder()

    if state.error:
        return render_error(state.error)

    if state.content:
        return render_content(state.content, pending=state.pending)

    if state.done:
        return Text("No insights were generated.", style=COLORS["dim"])

    if not state.pending and state.url is not None:
        return Text("Stream closed.", style=COLORS["dim"])

    return render_loading()
