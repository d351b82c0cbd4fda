"""
HTTP Transport
==============

The only network dependency of the stream client.

A Transport opens a GET request, completes as soon as the response
headers arrive, and hands back a StreamResponse that exposes the
Content-Type header and reads the body incrementally. The client only
talks to these two protocols, so tests can substitute a scripted fake.

Design Rules:
    - open() raises StreamConnectError for non-2xx responses
    - read() returns b"" once the body is exhausted
    - aclose() releases the body, the response and the HTTP client
"""

import logging
from typing import AsyncIterator, Optional, Protocol

import httpx

from mjpeg_stream.errors import StreamConnectError


logger = logging.getLogger(__name__)


class StreamResponse(Protocol):
    """An open streaming HTTP response."""

    @property
    def content_type(self) -> str: ...

    async def read(self, size: int) -> bytes: ...

    async def aclose(self) -> None: ...


class Transport(Protocol):
    """Capability to open a streaming GET request."""

    async def open(self, url: str) -> StreamResponse: ...


class HttpxStreamResponse:
    """
    StreamResponse backed by an httpx streaming response.

    httpx yields body chunks of whatever size arrived on the socket;
    read() hands them out at most `size` bytes at a time and keeps the
    remainder for the next call.
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self._client = client
        self._response = response
        self._chunks: AsyncIterator[bytes] = response.aiter_bytes()
        self._pending: bytes = b""
        self._closed: bool = False

    @property
    def content_type(self) -> str:
        return self._response.headers.get("content-type", "")

    @property
    def status_code(self) -> int:
        return self._response.status_code

    async def read(self, size: int) -> bytes:
        while not self._pending:
            try:
                self._pending = await anext(self._chunks)
            except StopAsyncIteration:
                return b""

        data = self._pending[:size]
        self._pending = self._pending[size:]
        return data

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class HttpxTransport:
    """
    Transport that opens one httpx.AsyncClient per connection attempt.

    Attributes:
        timeout: Connect/read timeout in seconds
        headers: Extra request headers
        http_transport: Optional httpx transport (e.g. httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        headers: Optional[dict] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.timeout = timeout
        self.headers = headers or {}
        self.http_transport = http_transport

    async def open(self, url: str) -> HttpxStreamResponse:
        """
        Send GET and return once the response headers are in.

        Args:
            url: Stream URL

        Returns:
            Open HttpxStreamResponse. The caller must aclose() it.

        Raises:
            StreamConnectError: On a non-2xx status
            httpx.HTTPError: On transport failures (bad URL, unreachable host)
        """
        client = httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self.http_transport,
        )
        try:
            request = client.build_request("GET", url, headers=self.headers)
            response = await client.send(request, stream=True)
        except BaseException:
            await client.aclose()
            raise

        if not response.is_success:
            status = response.status_code
            await response.aclose()
            await client.aclose()
            raise StreamConnectError(f"HTTP {status} from {url}")

        logger.debug(
            f"Opened {url}: HTTP {response.status_code}, "
            f"content-type={response.headers.get('content-type')!r}"
        )
        return HttpxStreamResponse(client, response)
