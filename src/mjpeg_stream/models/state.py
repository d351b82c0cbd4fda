"""
Connection State Models
=======================

States of the stream client's control loop.

Transitions:
    CONNECTING       → WORKING           connection opened, content type accepted
    CONNECTING       → ERROR_CONNECTING  any connect-phase failure
    WORKING          → WORKING           chunk read and parsed
    WORKING          → ERROR_WORKING     zero-byte read (clean end of stream)
    WORKING          → ERROR_CONNECTING  any other read-phase failure
    ERROR_CONNECTING → CONNECTING        after the fixed idle delay
    ERROR_WORKING    → CONNECTING        after the fixed idle delay
    any              → PAUSED            pause() while not paused
    PAUSED           → CONNECTING        pause() again, or unpause()

There is no terminal state. The loop cycles until stop() is honored.
"""

from enum import Enum


class ConnectionState(str, Enum):
    """
    Connection state of an MjpegStreamClient.

    Exactly one value per client, written only by the client's own
    control loop.

    Attributes:
        CONNECTING: Opening the HTTP connection and classifying the body
        WORKING: Reading chunks and extracting frames
        ERROR_CONNECTING: Connect or read fault, reconnect pending
        ERROR_WORKING: Stream ended cleanly, reconnect pending
        PAUSED: No reading, no parsing
    """

    CONNECTING = "CONNECTING"
    WORKING = "WORKING"
    ERROR_CONNECTING = "ERROR_CONNECTING"
    ERROR_WORKING = "ERROR_WORKING"
    PAUSED = "PAUSED"


class FinishReason(str, Enum):
    """
    Reason passed to on_finished subscribers when the control loop exits.

    Attributes:
        STOPPED_BY_USER: stop() was called
        END_OF_STREAM: Reconnect limit hit, last failure was a clean end
        SOURCE_ERROR: Reconnect limit hit, last failure was a fault
    """

    STOPPED_BY_USER = "STOPPED_BY_USER"
    END_OF_STREAM = "END_OF_STREAM"
    SOURCE_ERROR = "SOURCE_ERROR"
