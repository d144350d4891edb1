"""Pytest configuration and shared fixtures for insights-cli tests."""

import asyncio
import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


# ============================================================================
# Event Source Fakes
# ============================================================================

_END_OF_STREAM = object()


class FakeEventSource:
    """Scriptable stand-in for ``SSEStreamClient.stream_events``.

    Each opened URL gets its own queue; push events or exceptions into it,
    or ``end()`` it. Records which URLs were opened and released.
    """

    def __init__(self):
        self.opened: list[str] = []
        self.released: list[str] = []
        self.queues: dict[str, asyncio.Queue] = {}

    def queue(self, url):
        return self.queues.setdefault(url, asyncio.Queue())

    def push(self, url, *items):
        for item in items:
            self.queue(url).put_nowait(item)

    def end(self, url):
        self.queue(url).put_nowait(_END_OF_STREAM)

    async def __call__(self, url):
        self.opened.append(url)
        queue = self.queue(url)
        try:
            while True:
                item = await queue.get()
                if item is _END_OF_STREAM:
                    return
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            self.released.append(url)


@pytest.fixture
def event_source():
    """Create a FakeEventSource."""
    return FakeEventSource()


@pytest.fixture
def session(event_source):
    """Create a StreamSession reading from the fake event source."""
    from insights_cli.streaming.session import StreamSession

    return StreamSession(event_source)


@pytest.fixture
def settle():
    """Return a coroutine function that lets pending tasks run."""

    async def _settle(rounds: int = 5) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle


# ============================================================================
# SSE Wire Fixtures
# ============================================================================


@pytest.fixture
def sse_body():
    """Return a helper joining raw SSE frames into a response body."""

    def _sse_body(*frames: str) -> bytes:
        return "".join(f"{frame}\n\n" for frame in frames).encode("utf-8")

    return _sse_body


@pytest.fixture
def fragment_frame():
    """Return a helper building an unnamed SSE frame for a text fragment."""

    def _fragment_frame(text: str) -> str:
        return "data: " + json.dumps(text)

    return _fragment_frame


@pytest.fixture
def stream_url():
    """Insights stream URL carrying a test token."""
    return "http://test/api/ai/insights?token=tok-123"


# ============================================================================
# Console & Display Fixtures
# ============================================================================


@pytest.fixture
def mock_console():
    """Mock Rich console for testing display functions."""
    console = Mock()
    console.print = Mock()
    console.file = Mock()
    return console
