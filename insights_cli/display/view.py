"""Terminal views driven by stream session state changes."""

from rich.console import Console
from rich.live import Live

from insights_cli.core import COLORS, console as default_console
from insights_cli.display.rendering import render_error, render_state
from insights_cli.streaming.session import StreamState


class InsightsView:
    """Live-updating region showing the insights stream.

    Pass ``update`` as the session's ``on_change`` listener.
    """

    def __init__(self, console: Console | None = None, *, activated: bool = True) -> None:
        """Initialize the view.

        Args:
            console: Rich console to render on (defaults to the shared console)
            activated: False to show the pre-activation placeholder
        """
        self._console = console or default_console
        self.activated = activated
        self.last_state = StreamState()
        self._live = Live(
            render_state(self.last_state, activated=activated),
            console=self._console,
            refresh_per_second=12,
        )

    def __enter__(self) -> "InsightsView":
        self._live.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._live.stop()

    def update(self, state: StreamState) -> None:
        """Render a new state snapshot."""
        self.last_state = state
        self._live.update(render_state(state, activated=self.activated), refresh=True)


class PlainStreamPrinter:
    """Writes fragments straight to the console as they arrive.

    Used for non-interactive output where a live region would garble pipes.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or default_console
        self._printed = 0
        self._finished = False
        self.last_state = StreamState()

    def __enter__(self) -> "PlainStreamPrinter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._printed and not self._finished:
            self._console.print()

    def update(self, state: StreamState) -> None:
        """Print whatever text is new since the last update."""
        self.last_state = state

        if len(state.content) < self._printed:
            # A fresh stream was opened
            self._printed = 0
            self._finished = False

        if new_text := state.content[self._printed :]:
            self._console.print(new_text, end="", markup=False, style=COLORS["content"])
            if hasattr(self._console.file, "flush"):
                self._console.file.flush()
            self._printed = len(state.content)

        if state.done and not self._finished:
            self._finished = True
            if self._printed:
                self._console.print()
            if state.error:
                self._console.print(render_error(state.error))
