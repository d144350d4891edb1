"""Integration tests: client, session and binding over a mock HTTP transport."""

import json

import httpx
import pytest

from insights_cli.api.client import SSEStreamClient
from insights_cli.streaming import InsightsActivation, StreamBinding, StreamSession, StreamStatus


def _body(*frames: str) -> bytes:
    return "".join(f"{frame}\n\n" for frame in frames).encode("utf-8")


def _fragment(text: str) -> str:
    return "data: " + json.dumps(text)


def _client(handler) -> SSEStreamClient:
    return SSEStreamClient(base_url="http://test", timeout=1.0, transport=httpx.MockTransport(handler))


async def _run(handler, token: str = "tok-123"):
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = _client(recording_handler)
    try:
        activation = InsightsActivation(client.base_url, lambda: token)
        session = StreamSession(client.stream_events)
        async with StreamBinding(session) as binding:
            binding.bind(activation.activate())
            state = await session.wait()
    finally:
        await client.close()
    return state, requests


class TestInsightsStreamOverHttp:
    """End-to-end behaviour against a scripted server."""

    @pytest.mark.asyncio
    async def test_streamed_insights_complete(self):
        body = _body(_fragment("Hello"), _fragment(" world"), "event: done\ndata: {}")

        state, requests = await _run(lambda _r: httpx.Response(200, content=body))

        assert state.content == "Hello world"
        assert state.done is True
        assert state.error is None
        assert state.status is StreamStatus.DONE
        assert requests[0].url.path == "/api/ai/insights"
        assert requests[0].url.params["token"] == "tok-123"

    @pytest.mark.asyncio
    async def test_server_error_event(self):
        body = _body('event: error\ndata: "rate limited"')

        state, _ = await _run(lambda _r: httpx.Response(200, content=body))

        assert state.error == "rate limited"
        assert state.done is True
        assert state.content == ""

    @pytest.mark.asyncio
    async def test_error_after_partial_output(self):
        body = _body(
            _fragment("You mostly watch"),
            'event: error\ndata: "upstream model failed"',
            _fragment(" sci-fi"),
        )

        state, _ = await _run(lambda _r: httpx.Response(200, content=body))

        assert state.content == "You mostly watch"
        assert state.error == "upstream model failed"

    @pytest.mark.asyncio
    async def test_malformed_fragment_does_not_abort(self):
        body = _body(_fragment("A"), "data: {oops", _fragment("B"), "event: done\ndata: {}")

        state, _ = await _run(lambda _r: httpx.Response(200, content=body))

        assert state.content == "AB"
        assert state.error is None
        assert state.done is True

    @pytest.mark.asyncio
    async def test_unauthorized_is_connection_error(self):
        state, _ = await _run(lambda _r: httpx.Response(401, json={"error": "invalid token"}))

        assert state.error == "Connection error"
        assert state.done is True

    @pytest.mark.asyncio
    async def test_refused_connection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        state, _ = await _run(handler)

        assert state.error == "Connection error"
        assert state.status is StreamStatus.ERRORED

    @pytest.mark.asyncio
    async def test_stalled_stream_with_timeout(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("no data", request=request)

        state, _ = await _run(handler)

        assert state.error == "Connection error"

    @pytest.mark.asyncio
    async def test_connection_dropped_before_done(self):
        body = _body(_fragment("Half an answer"))

        state, _ = await _run(lambda _r: httpx.Response(200, content=body))

        assert state.content == "Half an answer"
        assert state.error == "Connection error"
