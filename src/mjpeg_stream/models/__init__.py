"""
Data Models
===========

Enumerations shared by the stream client and its collaborators.

Models:
    - ConnectionState: States of the connection state machine
    - FinishReason: Why the control loop exited
"""

from mjpeg_stream.models.state import ConnectionState, FinishReason

__all__ = [
    "ConnectionState",
    "FinishReason",
]
