"""
Stream Errors
=============

Exception taxonomy for the MJPEG stream client.

Only StreamConfigError ever reaches the caller. Every other error is
raised inside the control loop and mapped to a state transition there.
"""


class StreamError(Exception):
    """Base class for all stream client errors."""
    pass


class StreamConfigError(StreamError, ValueError):
    """Raised synchronously when the stream source cannot be used at all."""
    pass


class StreamConnectError(StreamError):
    """Raised when an HTTP connection to the source cannot be established."""
    pass


class InvalidContentTypeError(StreamConnectError):
    """Raised when the response is neither octet-stream nor multipart/mixed."""

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(f"Invalid content type: {content_type!r}")


class StreamEndedError(StreamError):
    """Zero-byte read sentinel. Never forwarded to subscribers."""

    def __init__(self) -> None:
        super().__init__("Stream ended")
