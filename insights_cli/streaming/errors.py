"""Transport error detection and formatting for stream sessions."""

import httpx

# Truncate long exception strings in log context
_MAX_DETAIL_LENGTH = 200


class StreamInterruptedError(Exception):
    """The stream ended before a done or error event arrived."""


TRANSPORT_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, StreamInterruptedError)


def describe_transport_error(e: BaseException) -> str:
    """Short description of a transport failure for logs.

    The user only ever sees the generic connection-error message; this detail
    goes to the log file.

    Args:
        e: The transport exception.

    Returns:
        A one-line description.
    """
    if isinstance(e, httpx.HTTPStatusError):
        return f"HTTP {e.response.status_code}"
    if isinstance(e, httpx.TimeoutException):
        return "stream stalled (read timeout)" if isinstance(e, httpx.ReadTimeout) else "timed out"
    if isinstance(e, StreamInterruptedError):
        return "stream ended without a terminal event"

    detail = str(e) or type(e).__name__
    if len(detail) > _MAX_DETAIL_LENGTH:
        detail = detail[:_MAX_DETAIL_LENGTH] + "..."
    return detail
