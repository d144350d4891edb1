"""
Data Models for API Client Module
===================================

Tagged events delivered by the SSE transport to a stream session. The client
yields exactly one of these per accepted SSE frame, in transport order.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class FragmentEvent:
    """One incremental unit of generated text."""

    text: str


@dataclass(frozen=True)
class DoneEvent:
    """Normal completion of the stream."""


@dataclass(frozen=True)
class ErrorEvent:
    """Application-level failure reported by the server.

    ``message`` is None when the server sent the event without a diagnostic.
    """

    message: Optional[str] = None


StreamEvent = Union[FragmentEvent, DoneEvent, ErrorEvent]
