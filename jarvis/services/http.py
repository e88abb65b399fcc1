"""Shared outbound HTTP client.

Webhook deliverers and notifiers post through one pooled
httpx.AsyncClient that lives for the duration of the app lifespan.
"""

from __future__ import annotations

import httpx
import structlog

logger = structlog.get_logger()


class HTTPClientManager:
    """Owns the shared httpx.AsyncClient.

    Usage:
        await http_client_manager.startup()
        response = await http_client_manager.client.post(url, json=payload)
        await http_client_manager.shutdown()
    """

    def __init__(
        self,
        *,
        max_connections: int = 50,
        max_keepalive_connections: int = 10,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
    ) -> None:
        self._max_connections = max_connections
        self._max_keepalive_connections = max_keepalive_connections
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout

        self._client: httpx.AsyncClient | None = None
        self._log = logger.bind(component="http_client")

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the shared HTTP client.

        Raises:
            RuntimeError: If startup() has not been called
        """
        if self._client is None:
            raise RuntimeError("HTTP client not initialized. Call startup() first.")
        return self._client

    @property
    def is_started(self) -> bool:
        return self._client is not None

    async def startup(self) -> None:
        if self._client is not None:
            self._log.warning("http_client.already_started")
            return

        self._client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=self._max_connections,
                max_keepalive_connections=self._max_keepalive_connections,
            ),
            timeout=httpx.Timeout(self._read_timeout, connect=self._connect_timeout),
        )
        self._log.info("http_client.started", max_connections=self._max_connections)

    async def shutdown(self) -> None:
        if self._client is None:
            return

        await self._client.aclose()
        self._client = None
        self._log.info("http_client.shutdown")


http_client_manager = HTTPClientManager()


def get_http_client() -> httpx.AsyncClient:
    """Get the shared HTTP client."""
    return http_client_manager.client
