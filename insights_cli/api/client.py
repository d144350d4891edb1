"""
SSE Stream Client for insights-cli
===================================

HTTP/SSE client for the insights stream served by the media-tracker API.
Frames are decoded into tagged stream events and yielded in transport order.
"""

import json
from typing import AsyncGenerator, AsyncIterator, List, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import httpx
import structlog

from insights_cli.api.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT,
    DONE_EVENT,
    ERROR_EVENT,
    INSIGHTS_PATH,
    MESSAGE_EVENT,
    TOKEN_QUERY_PARAM,
)
from insights_cli.api.models import DoneEvent, ErrorEvent, FragmentEvent, StreamEvent

logger = structlog.get_logger(__name__)


def build_stream_url(base_url: str, token: str, path: str = INSIGHTS_PATH) -> str:
    """Build the stream URL with the bearer credential as a query parameter.

    The SSE transport cannot carry an Authorization header, so the token is
    sent as ``?token=...`` instead.

    Args:
        base_url: Server base URL
        token: Bearer token issued by the auth service
        path: Endpoint path

    Returns:
        Absolute stream URL

    Raises:
        ValueError: If the token is blank
    """
    if not token or not token.strip():
        raise ValueError("A non-empty token is required to open the insights stream")
    url = urljoin(base_url.rstrip("/") + "/", path.lstrip("/"))
    return f"{url}?{urlencode({TOKEN_QUERY_PARAM: token})}"


def redact_token(url: str) -> str:
    """Mask the token query parameter so URLs can be logged."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    query = [
        (key, "***" if key == TOKEN_QUERY_PARAM else value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query)))


def _decode_error_message(payload: str) -> Optional[str]:
    """Extract the diagnostic from an ``error`` event payload.

    The server JSON-encodes the message; anything else is used verbatim.
    """
    if not payload.strip():
        return None
    try:
        decoded = json.loads(payload)
    except json.JSONDecodeError:
        return payload
    if isinstance(decoded, str):
        return decoded or None
    return payload


def parse_sse_event(event_text: str) -> Optional[StreamEvent]:
    """
    Parse one SSE frame into a stream event.

    SSE format:
        event: done
        data: {}

    Unnamed frames carry a JSON-encoded string fragment. ``id:``/``retry:``
    fields and ``:`` comments are ignored since the stream is never resumed.

    Args:
        event_text: Raw SSE frame (lines without the terminating blank line)

    Returns:
        The decoded event, or None if the frame is dropped
    """
    event_type = MESSAGE_EVENT
    data_lines: List[str] = []

    for line in event_text.split("\n"):
        if not line or line.startswith(":"):
            continue

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            event_type = value.strip() or MESSAGE_EVENT
        elif field == "data":
            data_lines.append(value)

    payload = "\n".join(data_lines)

    if event_type == DONE_EVENT:
        return DoneEvent()

    if event_type == ERROR_EVENT:
        return ErrorEvent(_decode_error_message(payload))

    if event_type != MESSAGE_EVENT:
        logger.debug("sse_event_ignored", event_type=event_type)
        return None

    if not data_lines:
        return None

    try:
        text = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("stream_fragment_dropped", reason="invalid_json", size=len(payload))
        return None

    if not isinstance(text, str):
        logger.debug("stream_fragment_dropped", reason="not_a_string", type=type(text).__name__)
        return None

    return FragmentEvent(text)


class SSEStreamClient:
    """
    Client for the insights SSE stream.

    Handles:
    - Building the credential-bearing stream URL
    - Opening the streaming GET request
    - Splitting the body into SSE frames and decoding events

    The client never retries or reconnects; recovery is left to the caller.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        stall_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the SSE stream client.

        Args:
            base_url: Server base URL
            timeout: Connect/write/pool timeout in seconds
            stall_timeout: Maximum seconds between stream bytes (None waits forever)
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.stall_timeout = stall_timeout
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, read=stall_timeout),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "SSEStreamClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _iter_frames(self, response: httpx.Response) -> AsyncIterator[str]:
        """Group response lines into SSE frames.

        A trailing frame without its blank-line terminator is incomplete and
        is discarded.
        """
        lines: List[str] = []
        async for line in response.aiter_lines():
            if line:
                lines.append(line)
                continue
            if lines:
                yield "\n".join(lines)
                lines = []

    async def stream_events(self, url: str) -> AsyncGenerator[StreamEvent, None]:
        """
        Stream events from an SSE endpoint.

        Args:
            url: Absolute stream URL (already carrying the credential)

        Yields:
            Stream events in the order the transport delivered them

        Raises:
            httpx.HTTPStatusError: If the server answers with a non-2xx status
            httpx.TransportError: If the connection fails or stalls
        """
        logger.debug("sse_request", url=redact_token(url))

        async with self.client.stream(
            "GET",
            url,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        ) as response:
            response.raise_for_status()
            async for frame in self._iter_frames(response):
                if (event := parse_sse_event(frame)) is not None:
                    yield event
