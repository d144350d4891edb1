"""Stream session lifecycle and consumer binding."""

from insights_cli.streaming.binding import InsightsActivation, StreamBinding
from insights_cli.streaming.errors import StreamInterruptedError, describe_transport_error
from insights_cli.streaming.session import StreamSession, StreamState, StreamStatus

__all__ = [
    "InsightsActivation",
    "StreamBinding",
    "StreamInterruptedError",
    "StreamSession",
    "StreamState",
    "StreamStatus",
    "describe_transport_error",
]
