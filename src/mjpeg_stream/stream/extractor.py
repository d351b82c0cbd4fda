"""
Frame Extractor
===============

Incremental JPEG frame extraction from a ReadBuffer.

Each call scans only what the previous call could not resolve. Parser
progress lives in an explicit ParserState value owned by the caller:

    SEEKING_START: look for the JPEG start marker (FF D8 FF) from pos.
        found     → start = match, pos past the marker, SEEKING_END
        not found → keep the last len(marker) - 1 bytes, drop the rest
    SEEKING_END: look for the delimiter from pos. The delimiter is the
        boundary token, or the JPEG start marker itself when the token
        is empty (that marker then opens the next frame).
        found     → yield copy of [start, stop), pos = stop + len(boundary),
                    compact the buffer, SEEKING_START
        not found → keep the last len(delimiter) - 1 bytes unscanned

Design Rules:
    - No I/O, no logging of its own, no exceptions on malformed data
    - Frames are copies; the buffer is never handed to consumers
    - The buffer is compacted only after the consumer resumes the generator
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from mjpeg_stream.stream.buffer import ReadBuffer


JPEG_START_MARKER = b"\xff\xd8\xff"


class AlignmentPhase(str, Enum):
    """Whether the extractor is looking for a frame start or its end."""

    SEEKING_START = "SEEKING_START"
    SEEKING_END = "SEEKING_END"


@dataclass
class ParserState:
    """
    Cursor state threaded through successive extract_frames() calls.

    Attributes:
        phase: Current alignment phase
        pos: Offset where the next search starts
        start: Offset of the current frame's start marker (SEEKING_END only)
    """

    phase: AlignmentPhase = AlignmentPhase.SEEKING_START
    pos: int = 0
    start: int = 0

    def reset(self) -> None:
        self.phase = AlignmentPhase.SEEKING_START
        self.pos = 0
        self.start = 0


def extract_frames(
    buffer: ReadBuffer,
    state: ParserState,
    boundary: bytes = b"",
    marker: bytes = JPEG_START_MARKER,
) -> Iterator[bytes]:
    """
    Yield every complete frame currently in the buffer.

    Args:
        buffer: Buffer holding pending stream bytes
        state: Parser state, updated in place
        boundary: Boundary token separating parts, or b"" for marker-only
        marker: JPEG start marker

    Yields:
        Independently owned bytes of each complete frame, in stream order.
    """
    delimiter = boundary or marker

    while True:
        if state.phase is AlignmentPhase.SEEKING_START:
            index = buffer.find(marker, state.pos)
            if index == -1:
                # A marker may straddle the read seam; keep its possible prefix.
                keep_from = max(buffer.write_pos - (len(marker) - 1), state.pos)
                buffer.compact(keep_from)
                state.pos = 0
                return

            state.start = index
            state.pos = index + len(marker)
            state.phase = AlignmentPhase.SEEKING_END

        stop = buffer.find(delimiter, state.pos)
        if stop == -1:
            state.pos = max(buffer.write_pos - (len(delimiter) - 1), state.pos)
            return

        frame = buffer.copy(state.start, stop)
        state.pos = stop + len(boundary)
        yield frame

        buffer.compact(state.pos)
        state.reset()


def make_room(buffer: ReadBuffer, state: ParserState, size: int) -> bool:
    """
    Ensure the next read of `size` bytes fits in the buffer.

    When it does not, the buffer is cleared and the parser restarts from
    SEEKING_START. Any partial frame is dropped.

    Args:
        buffer: Buffer about to receive a read
        state: Parser state to reset on overflow
        size: Maximum bytes the next read may return

    Returns:
        True if pending data was dropped, False if there was room.
    """
    if buffer.free >= size:
        return False

    buffer.clear()
    state.reset()
    return True
