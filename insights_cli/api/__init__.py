"""
API Client Module for insights-cli
===================================

HTTP/SSE client for the insights stream served by the media-tracker API.

Components:
- client: SSEStreamClient and the SSE wire parser
- models: tagged stream events (fragment, done, error)
- constants: endpoint paths, event names and fallback messages
"""

from insights_cli.api.client import SSEStreamClient, build_stream_url, parse_sse_event
from insights_cli.api.constants import (
    CONNECTION_ERROR_MESSAGE,
    DEFAULT_BASE_URL,
    INSIGHTS_PATH,
    STREAM_ERROR_MESSAGE,
)
from insights_cli.api.models import DoneEvent, ErrorEvent, FragmentEvent, StreamEvent

__all__ = [
    # Client
    "SSEStreamClient",
    "build_stream_url",
    "parse_sse_event",
    # Models
    "DoneEvent",
    "ErrorEvent",
    "FragmentEvent",
    "StreamEvent",
    # Constants
    "CONNECTION_ERROR_MESSAGE",
    "DEFAULT_BASE_URL",
    "INSIGHTS_PATH",
    "STREAM_ERROR_MESSAGE",
]
