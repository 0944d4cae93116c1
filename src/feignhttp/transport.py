"""Transport implementation using httpx."""

from __future__ import annotations

import logging

import httpx

from .config import ClientConfig
from .errors import TransportError
from .types import RawResponse, Transport

logger = logging.getLogger(__name__)


class HttpxTransport:
    """Default transport implementation using ``httpx.AsyncClient``.

    The client is created on first use and shared by every endpoint that
    uses this transport, so connections are pooled across calls. Declared
    endpoint timeouts take precedence over the configured defaults.

    Example:
        Share one transport between declared clients::

            async with HttpxTransport(ClientConfig(read_timeout_ms=5000)) as transport:
                github = GitHub(transport=transport)
                repo = await github.repository("dxx", "feignhttp")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ClientConfig()
        self._transport = transport
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """The underlying httpx client, created on first access."""
        if self._client is None:
            headers = {"User-Agent": self.config.user_agent, **self.config.headers}
            self._client = httpx.AsyncClient(
                headers=headers,
                timeout=self._timeout(None, None),
                verify=self.config.verify_ssl,
                follow_redirects=self.config.follow_redirects,
                transport=self._transport,
            )
        return self._client

    async def __aenter__(self):
        """Enter async context."""
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client and its connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _timeout(self, connect_timeout_ms: int | None, read_timeout_ms: int | None) -> httpx.Timeout:
        """Build an httpx timeout from millisecond values and the configured defaults."""
        if connect_timeout_ms is None:
            connect_timeout_ms = self.config.connect_timeout_ms
        if read_timeout_ms is None:
            read_timeout_ms = self.config.read_timeout_ms
        return httpx.Timeout(read_timeout_ms / 1000, connect=connect_timeout_ms / 1000)

    async def execute(
        self,
        method: str,
        url: str,
        headers: tuple[tuple[str, str], ...],
        body: bytes | None,
        connect_timeout_ms: int | None,
        read_timeout_ms: int | None,
    ) -> RawResponse:
        """Send one request and return its response.

        Non-success statuses are returned as responses; only failures to
        obtain a response raise.

        Raises:
            TransportError: If the request could not be sent or no response arrived
        """
        logger.debug(f"Sending {method} {url}")
        try:
            request = self.client.build_request(
                method=method,
                url=url,
                headers=list(headers),
                content=body,
                timeout=self._timeout(connect_timeout_ms, read_timeout_ms),
            )
            response = await self.client.send(request)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"{method} {url} failed: {e!r}")
            raise TransportError(f"{method} {url} failed: {e}", cause=e) from e
        logger.debug(f"Received {response.status_code} from {method} {url}")

        return RawResponse(
            status_code=response.status_code,
            headers=tuple(response.headers.multi_items()),
            content=response.content,
            url=str(response.url),
        )


_default_transport: Transport | None = None


def get_default_transport() -> Transport:
    """Get the transport used by endpoints that are not given one.

    An ``HttpxTransport`` configured from the environment is created on
    first use.
    """
    global _default_transport
    if _default_transport is None:
        _default_transport = HttpxTransport(ClientConfig.from_env())
    return _default_transport


def set_default_transport(transport: Transport | None) -> None:
    """Replace the default transport; ``None`` resets to a fresh one on next use."""
    global _default_transport
    _default_transport = transport
