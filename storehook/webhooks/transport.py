"""Outbound HTTP transport.

A transport is single use: the dispatcher creates one per send, writes
the request, reads the complete raw response (status line, headers and
body) and closes it.
"""

from collections.abc import Callable
from typing import Protocol

import httpx
import structlog

from storehook.config import settings

logger = structlog.get_logger(__name__)

HTTP_VERSION = "1.1"


class Transport(Protocol):
    """Connection used for a single outbound request."""

    async def write(
        self,
        method: str,
        url: str,
        http_version: str,
        headers: list[str],
        body: str,
    ) -> None: ...

    async def read(self) -> str: ...

    async def close(self) -> None: ...


TransportFactory = Callable[[], Transport]


def parse_header_lines(lines: list[str]) -> list[tuple[str, str]]:
    """Split ``"Name: value"`` lines into pairs, skipping malformed ones."""
    pairs: list[tuple[str, str]] = []
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            logger.warning("malformed_header_skipped", header=line)
            continue
        pairs.append((name.strip(), value.strip()))
    return pairs


def format_raw_response(response: httpx.Response) -> str:
    """Rebuild the raw HTTP/1.1 response text from an httpx response."""
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    header_lines = [f"{name}: {value}" for name, value in response.headers.multi_items()]
    head = "\r\n".join([status_line, *header_lines])
    return f"{head}\r\n\r\n{response.text}"


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    Example:
        transport = HttpxTransport(timeout=10)
        await transport.write("POST", url, "1.1", ["Content-Type: application/json"], body)
        raw = await transport.read()
        await transport.close()
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds (from settings if not provided).
            http_transport: Optional httpx transport (e.g. MockTransport in tests).
        """
        self._client = httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=http_transport,
        )
        self._request: httpx.Request | None = None

    async def write(
        self,
        method: str,
        url: str,
        http_version: str,
        headers: list[str],
        body: str,
    ) -> None:
        if http_version != HTTP_VERSION:
            logger.debug("http_version_ignored", requested=http_version)

        self._request = self._client.build_request(
            method,
            url,
            headers=parse_header_lines(headers),
            content=body.encode("utf-8") if body else None,
        )

    async def read(self) -> str:
        if self._request is None:
            raise RuntimeError("No request written")

        response = await self._client.send(self._request)
        return format_raw_response(response)

    async def close(self) -> None:
        await self._client.aclose()
