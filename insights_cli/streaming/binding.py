"""Consumer binding: ties a stream session's lifetime to its target URL and owner."""

from collections.abc import Callable

import structlog

from insights_cli.api.client import build_stream_url, redact_token
from insights_cli.streaming.session import StreamSession

logger = structlog.get_logger(__name__)

TokenProvider = Callable[[], str | None]


class InsightsActivation:
    """Derives the insights stream URL once the user asks for it.

    Generating insights is expensive, so no URL exists until ``activate()``
    has been called and the credential provider returns a token.
    """

    def __init__(self, base_url: str, token_provider: TokenProvider) -> None:
        """Initialize the activation gate.

        Args:
            base_url: Server base URL
            token_provider: Returns the current bearer token (or None) synchronously
        """
        self.base_url = base_url
        self._token_provider = token_provider
        self._activated = False

    @property
    def activated(self) -> bool:
        """Check if the user has asked for insights."""
        return self._activated

    @property
    def url(self) -> str | None:
        """Stream URL, or None before activation or without a token."""
        if not self._activated:
            return None
        token = self._token_provider()
        if not token or not token.strip():
            return None
        return build_stream_url(self.base_url, token)

    def activate(self) -> str | None:
        """Mark insights as requested and return the resulting URL."""
        self._activated = True
        return self.url


class StreamBinding:
    """Mounts a stream session on a nullable target URL.

    Changing the URL closes the previous connection before the new one is
    opened, and ``teardown()`` guarantees no connection outlives the owner.
    """

    def __init__(self, session: StreamSession) -> None:
        """Initialize the binding.

        Args:
            session: Session whose connection this binding manages
        """
        self.session = session
        self._url: str | None = None

    @property
    def url(self) -> str | None:
        """Currently bound URL (None shows the pre-activation placeholder)."""
        return self._url

    @property
    def bound(self) -> bool:
        """Check if a URL is bound."""
        return self._url is not None

    def bind(self, url: str | None) -> None:
        """Point the binding at a new URL.

        Args:
            url: New stream URL; None or empty drops the connection without error
        """
        url = url or None
        if url == self._url:
            return

        previous, self._url = self._url, url
        self.session.close()

        if url is None:
            logger.info("stream_unbound", previous=redact_token(previous or ""))
            return

        self.session.open(url)

    def teardown(self) -> None:
        """Close any open connection; called when the owner goes away."""
        self._url = None
        self.session.close()

    async def aclose(self) -> None:
        """Tear down and wait until the connection is released."""
        self._url = None
        await self.session.aclose()

    async def __aenter__(self) -> "StreamBinding":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()
