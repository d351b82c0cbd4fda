"""
mjpeg_stream
============

Resilient MJPEG-over-HTTP stream client.

This package reads a live MJPEG stream (either a multipart HTTP body or raw
concatenated JPEG images), extracts each JPEG frame incrementally from a
bounded read buffer, and hands independently owned frame bytes to
subscribers. Connection failures are recovered by a small state machine
that always reconnects from scratch.

Components:
    - stream: read buffer, frame extractor, HTTP transport, stream client
    - models: connection state and finish reason enums
    - config: pydantic settings loaded from YAML and environment
    - errors: exception taxonomy

Example:
    import asyncio
    from mjpeg_stream import MjpegStreamClient

    async def main():
        client = MjpegStreamClient("http://camera.local/video.mjpg")
        client.on_frame.subscribe(lambda data, index: print(index, len(data)))
        client.start()
        await asyncio.sleep(10)
        await client.stop()

    asyncio.run(main())
"""

__version__ = "0.1.0"

from mjpeg_stream.config import StreamSource
from mjpeg_stream.errors import (
    InvalidContentTypeError,
    StreamConfigError,
    StreamConnectError,
    StreamError,
)
from mjpeg_stream.models import ConnectionState, FinishReason
from mjpeg_stream.stream import MjpegStreamClient


__all__ = [
    "__version__",
    "MjpegStreamClient",
    "StreamSource",
    "ConnectionState",
    "FinishReason",
    "StreamError",
    "StreamConfigError",
    "StreamConnectError",
    "InvalidContentTypeError",
]
