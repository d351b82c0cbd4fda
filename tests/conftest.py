"""
Test Configuration
==================

Pytest fixtures and fakes for mjpeg_stream.

The fake transport replays scripted connection outcomes so the client's
state machine can be driven tick by tick without a network.
"""

import asyncio
from collections import deque
from typing import List, Optional

import pytest

from mjpeg_stream.config import StreamSource


def make_jpeg(seed: int, size: int = 64) -> bytes:
    """Build a fake JPEG: SOI + APP0 marker, filler, EOI. Filler never contains 0xFF."""
    filler = bytes((seed * 7 + k) % 200 for k in range(size - 6))
    return b"\xff\xd8\xff\xe0" + filler + b"\xff\xd9"


def multipart_body(frames: List[bytes], boundary: bytes = b"--abc") -> bytes:
    """Multipart body with every frame followed directly by the next boundary line."""
    parts = []
    for frame in frames:
        parts.append(
            boundary + b"\r\n"
            + b"Content-Type: image/jpeg\r\n"
            + b"Content-Length: " + str(len(frame)).encode() + b"\r\n\r\n"
            + frame
        )
    return b"".join(parts) + boundary + b"--\r\n"


class FakeResponse:
    """Scripted StreamResponse. Raises `error` once its chunks run out, else returns b""."""

    def __init__(
        self,
        content_type: str,
        chunks: Optional[List[bytes]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.content_type = content_type
        self._chunks = deque(chunks or [])
        self._error = error
        self.reads = 0
        self.closed = False

    async def read(self, size: int) -> bytes:
        self.reads += 1
        await asyncio.sleep(0)
        if self._chunks:
            chunk = self._chunks.popleft()
            if len(chunk) > size:
                self._chunks.appendleft(chunk[size:])
                chunk = chunk[:size]
            return chunk
        if self._error is not None:
            raise self._error
        return b""

    async def aclose(self) -> None:
        self.closed = True


class StalledResponse(FakeResponse):
    """Response whose reads never complete."""

    async def read(self, size: int) -> bytes:
        self.reads += 1
        await asyncio.Event().wait()
        return b""


class FakeTransport:
    """Returns (or raises) the scripted outcomes in order, then refuses connections."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = deque(outcomes)
        self.opened: List[str] = []
        self.responses: List[FakeResponse] = []

    async def open(self, url: str) -> FakeResponse:
        self.opened.append(url)
        if not self.outcomes:
            raise ConnectionRefusedError("Connection refused")
        outcome = self.outcomes.popleft()
        if isinstance(outcome, Exception):
            raise outcome
        self.responses.append(outcome)
        return outcome


@pytest.fixture
def jpegs():
    """Five distinct fake JPEG payloads of varying size."""
    return [make_jpeg(i, 40 + i * 13) for i in range(5)]


@pytest.fixture
def source():
    """Small, zero-delay stream source for driving the client in tests."""
    return StreamSource(
        url="http://camera.test/video.mjpg",
        read_chunk_size=16,
        buffer_capacity=4096,
        reconnect_delay_seconds=0,
        pause_poll_seconds=0,
    )
