"""
Boundary Detection
==================

Derives the frame delimiter for a connection.

Two steps, both run once per connection attempt:
    1. parse_content_type(): classify the response from its Content-Type
       header and pull the declared boundary out of it.
    2. confirm_boundary(): locate the declared boundary in real body bytes
       and extend it backwards to the preceding line break. Some cameras
       declare "myboundary" while the body actually uses "--myboundary".

Supported content types:
    application/octet-stream        → b"" (JPEG markers only)
    multipart/*mixed*; boundary=X   → b"X"
    multipart/*mixed* (no boundary) → b""
"""

import logging
from typing import Optional

from mjpeg_stream.errors import InvalidContentTypeError
from mjpeg_stream.stream.buffer import ReadBuffer


logger = logging.getLogger(__name__)

_LINE_BREAKS = (ord("\r"), ord("\n"))


def parse_content_type(content_type: Optional[str]) -> bytes:
    """
    Classify a Content-Type header and return the declared boundary.

    Args:
        content_type: Raw header value, possibly None

    Returns:
        Declared boundary as ASCII bytes, or b"" when frames are delimited
        by JPEG markers alone.

    Raises:
        InvalidContentTypeError: For anything other than octet-stream or
            a multipart "mixed" type.
    """
    if not content_type:
        raise InvalidContentTypeError(content_type or "")

    media_type, _, params = content_type.partition(";")
    main_type, _, sub_type = media_type.strip().lower().partition("/")

    if main_type == "application" and sub_type == "octet-stream":
        return b""

    if main_type != "multipart" or "mixed" not in sub_type:
        raise InvalidContentTypeError(content_type)

    lowered = params.lower()
    index = lowered.find("boundary")
    if index != -1:
        index = lowered.find("=", index + len("boundary"))
    if index == -1:
        logger.warning(
            f"No boundary in {content_type!r}, falling back to JPEG markers"
        )
        return b""

    value = params[index + 1:].split(";", 1)[0]
    # Some cameras quote the value or pad it with spaces
    value = value.strip(' "')
    try:
        return value.encode("ascii")
    except UnicodeEncodeError:
        raise InvalidContentTypeError(content_type)


def confirm_boundary(buffer: ReadBuffer, declared: bytes) -> Optional[bytes]:
    """
    Re-derive the true delimiter from the first occurrence in the body.

    Walks backwards from the first match of the declared boundary to the
    preceding CR or LF (or the start of the buffer) and prepends every
    byte on the way.

    Args:
        buffer: Buffer holding the first body bytes of a connection
        declared: Boundary taken from the Content-Type header

    Returns:
        The delimiter actually used by the stream, or None if the declared
        boundary has not appeared yet.
    """
    index = buffer.find(declared, 0)
    if index == -1:
        return None

    line_start = index
    while line_start > 0 and buffer.byte_at(line_start - 1) not in _LINE_BREAKS:
        line_start -= 1

    actual = buffer.copy(line_start, index) + declared
    if actual != declared:
        logger.info(f"Boundary corrected from {declared!r} to {actual!r}")
    return actual
