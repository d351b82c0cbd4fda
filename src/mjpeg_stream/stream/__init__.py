"""
Stream Module
=============

MJPEG-over-HTTP ingestion components.

This module provides the ingestion layer for mjpeg_stream:
    - ReadBuffer: Fixed-capacity byte buffer with compaction
    - extract_frames / make_room: Incremental JPEG frame extraction
    - parse_content_type / confirm_boundary: Delimiter detection
    - HttpxTransport: Streaming HTTP GET behind the Transport protocol
    - EventHook: Per-event callback registry
    - MjpegStreamClient: Connection state machine and control loop

Example:
    from mjpeg_stream.stream import MjpegStreamClient

    client = MjpegStreamClient("http://camera.local/video.mjpg")
    client.on_frame.subscribe(lambda data, index: save(index, data))

    task = client.start()
    ...
    await client.stop()
"""

from mjpeg_stream.stream.buffer import BufferOverflowError, ReadBuffer
from mjpeg_stream.stream.extractor import (
    JPEG_START_MARKER,
    AlignmentPhase,
    ParserState,
    extract_frames,
    make_room,
)
from mjpeg_stream.stream.boundary import confirm_boundary, parse_content_type
from mjpeg_stream.stream.events import EventHook
from mjpeg_stream.stream.transport import (
    HttpxStreamResponse,
    HttpxTransport,
    StreamResponse,
    Transport,
)
from mjpeg_stream.stream.client import MjpegStreamClient


__all__ = [
    "ReadBuffer",
    "BufferOverflowError",
    "JPEG_START_MARKER",
    "AlignmentPhase",
    "ParserState",
    "extract_frames",
    "make_room",
    "parse_content_type",
    "confirm_boundary",
    "EventHook",
    "Transport",
    "StreamResponse",
    "HttpxTransport",
    "HttpxStreamResponse",
    "MjpegStreamClient",
]
