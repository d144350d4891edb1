"""Stream session: one SSE connection and the text accumulated from it."""

import asyncio
from collections.abc import AsyncGenerator, Callable
from contextlib import aclosing
from dataclasses import dataclass, replace
from enum import Enum

import structlog

from insights_cli.api.client import redact_token
from insights_cli.api.constants import CONNECTION_ERROR_MESSAGE, STREAM_ERROR_MESSAGE
from insights_cli.api.models import DoneEvent, ErrorEvent, FragmentEvent, StreamEvent
from insights_cli.streaming.errors import (
    TRANSPORT_ERRORS,
    StreamInterruptedError,
    describe_transport_error,
)

logger = structlog.get_logger(__name__)

EventSource = Callable[[str], AsyncGenerator[StreamEvent, None]]
StateListener = Callable[["StreamState"], None]


class StreamStatus(str, Enum):
    """Lifecycle of a stream session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    DONE = "done"
    ERRORED = "errored"


@dataclass
class StreamState:
    """Observable state of a stream session.

    Attributes:
        url: Target identifier of the current connection (None when inactive)
        content: Fragments concatenated in arrival order
        done: True once the stream reached a terminal state
        error: Terminal diagnostic, if the stream failed
        status: Current lifecycle status
        fragments: Number of fragments appended so far
    """

    url: str | None = None
    content: str = ""
    done: bool = False
    error: str | None = None
    status: StreamStatus = StreamStatus.IDLE
    fragments: int = 0

    @property
    def terminal(self) -> bool:
        """Check if the stream reached Done or Errored."""
        return self.status in (StreamStatus.DONE, StreamStatus.ERRORED)

    @property
    def pending(self) -> bool:
        """Check if the stream may still produce text."""
        return self.status in (StreamStatus.CONNECTING, StreamStatus.STREAMING)


class StreamSession:
    """Owns at most one live stream connection and its accumulated state.

    Events are pulled from ``source(url)`` by a consumer task on the running
    event loop. The connection is released on every exit path: done, error,
    transport failure, ``close()`` or leaving the ``async with`` block.
    """

    def __init__(self, source: EventSource, *, on_change: StateListener | None = None) -> None:
        """Initialize the session.

        Args:
            source: Callable opening a connection and yielding stream events
                (usually ``SSEStreamClient.stream_events``)
            on_change: Called with a snapshot of the state after every change
        """
        self._source = source
        self._on_change = on_change
        self._state = StreamState()
        self._task: asyncio.Task[None] | None = None
        # Bumped on every open/close; events from an older connection are discarded
        self._generation = 0

    @property
    def state(self) -> StreamState:
        """Snapshot of the current state."""
        return replace(self._state)

    @property
    def active(self) -> bool:
        """Check if a connection is currently held."""
        return self._task is not None and not self._task.done()

    def open(self, url: str) -> None:
        """Open a new connection, discarding any previous one.

        State is reset before any data is processed.

        Args:
            url: Stream URL

        Raises:
            ValueError: If the URL is empty
            RuntimeError: If called outside a running event loop
        """
        if not url:
            raise ValueError("Cannot open a stream without a URL")

        loop = asyncio.get_running_loop()
        self.close()

        self._generation += 1
        self._state = StreamState(url=url, status=StreamStatus.CONNECTING)
        self._task = loop.create_task(self._consume(url, self._generation), name="insights_stream")

        logger.info("stream_open", url=redact_token(url))
        self._notify()

    def close(self) -> None:
        """Release the connection. Idempotent.

        Undelivered fragments are discarded and the state is not mutated by
        the closed connection afterwards. Content and error are kept; a
        session closed before reaching a terminal state goes back to idle.
        """
        task, self._task = self._task, None
        self._generation += 1

        if task is None or task.done():
            return

        task.cancel()
        if self._state.pending:
            self._state.status = StreamStatus.IDLE
            self._notify()

        logger.info(
            "stream_closed",
            url=redact_token(self._state.url or ""),
            fragments=self._state.fragments,
        )

    async def aclose(self) -> None:
        """Close the connection and wait until it is fully released."""
        task = self._task
        self.close()
        if task is not None:
            await asyncio.wait({task})

    async def wait(self) -> StreamState:
        """Wait until the current connection is released.

        Returns:
            The state after the stream ended or was closed

        Raises:
            Exception: Anything unexpected raised by the consumer task
        """
        task = self._task
        if task is not None:
            await asyncio.wait({task})
            if not task.cancelled():
                task.result()
        return self.state

    async def __aenter__(self) -> "StreamSession":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    def handle_event(self, event: StreamEvent) -> None:
        """Apply one inbound event to the state.

        Events arriving after a terminal state are ignored.

        Args:
            event: Fragment, done or error event
        """
        state = self._state
        if state.terminal:
            return

        if state.status is StreamStatus.CONNECTING:
            state.status = StreamStatus.STREAMING

        if isinstance(event, FragmentEvent):
            state.content += event.text
            state.fragments += 1
        elif isinstance(event, DoneEvent):
            state.done = True
            state.status = StreamStatus.DONE
            logger.info("stream_done", fragments=state.fragments, length=len(state.content))
        elif isinstance(event, ErrorEvent):
            self._fail(event.message or STREAM_ERROR_MESSAGE)
            return

        self._notify()

    def _fail(self, message: str) -> None:
        state = self._state
        if state.terminal:
            return
        state.error = message
        state.done = True
        state.status = StreamStatus.ERRORED
        logger.warning("stream_error", error=message, fragments=state.fragments)
        self._notify()

    async def _consume(self, url: str, generation: int) -> None:
        try:
            async with aclosing(self._source(url)) as events:
                async for event in events:
                    if generation != self._generation:
                        return
                    self.handle_event(event)
                    if self._state.terminal:
                        return

            if generation == self._generation:
                raise StreamInterruptedError()
        except TRANSPORT_ERRORS as e:
            if generation != self._generation:
                return
            logger.warning(
                "stream_transport_error",
                error=describe_transport_error(e),
                error_type=type(e).__name__,
            )
            self._fail(CONNECTION_ERROR_MESSAGE)
        except Exception:
            if generation == self._generation:
                logger.exception("stream_consumer_failed")
                self._fail(CONNECTION_ERROR_MESSAGE)
            raise

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)
