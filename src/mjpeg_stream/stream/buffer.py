"""
Read Buffer
===========

Fixed-capacity byte region holding stream bytes read but not yet parsed.

The buffer is allocated once per client and reused for the client's whole
lifetime. Bytes live in [0, write_pos); the frame extractor owns the scan
cursor into that range and asks the buffer to compact once a frame has
been copied out.

Design Rules:
    - Never reallocated, never grows past capacity
    - Never exposes its storage; copy() returns independent bytes
    - Single owner (the client's control loop), no locking
"""

import logging


logger = logging.getLogger(__name__)


class BufferOverflowError(Exception):
    """Raised when an append would exceed the buffer capacity."""
    pass


class ReadBuffer:
    """
    Fixed-capacity byte buffer with a write cursor.

    Attributes:
        capacity: Maximum number of bytes held
        write_pos: End of pending data
        compactions: Number of compactions performed
        resets: Number of times the buffer was cleared

    Example:
        buffer = ReadBuffer(capacity=1024 * 1024)
        buffer.append(chunk)
        index = buffer.find(b"\\xff\\xd8\\xff", 0)
    """

    def __init__(self, capacity: int) -> None:
        """
        Initialize read buffer.

        Args:
            capacity: Size of the backing storage in bytes. Must be >= 1.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        self._capacity = capacity
        self._data = bytearray(capacity)
        self._write_pos: int = 0
        self._compactions: int = 0
        self._resets: int = 0

    @property
    def capacity(self) -> int:
        """Size of the backing storage."""
        return self._capacity

    @property
    def write_pos(self) -> int:
        """Offset one past the last pending byte."""
        return self._write_pos

    @property
    def free(self) -> int:
        """Bytes that can still be appended."""
        return self._capacity - self._write_pos

    @property
    def compactions(self) -> int:
        return self._compactions

    @property
    def resets(self) -> int:
        return self._resets

    def __len__(self) -> int:
        return self._write_pos

    def append(self, data: bytes) -> int:
        """
        Copy bytes into the buffer at write_pos.

        Args:
            data: Bytes to append

        Returns:
            Number of bytes appended.

        Raises:
            BufferOverflowError: If data does not fit.
        """
        size = len(data)
        if size > self.free:
            raise BufferOverflowError(
                f"Cannot append {size} bytes, only {self.free} free"
            )
        self._data[self._write_pos:self._write_pos + size] = data
        self._write_pos += size
        return size

    def find(self, pattern: bytes, start: int = 0) -> int:
        """
        Find pattern in pending data.

        Args:
            pattern: Byte sequence to search for
            start: Offset to start searching at

        Returns:
            Offset of the first match in [start, write_pos), or -1.
        """
        if not pattern:
            return -1
        return self._data.find(pattern, start, self._write_pos)

    def copy(self, start: int, stop: int) -> bytes:
        """Return an independently owned copy of bytes [start, stop)."""
        if not 0 <= start <= stop <= self._write_pos:
            raise IndexError(
                f"Range [{start}, {stop}) outside pending data [0, {self._write_pos})"
            )
        return bytes(self._data[start:stop])

    def byte_at(self, index: int) -> int:
        if not 0 <= index < self._write_pos:
            raise IndexError(f"Offset {index} outside pending data")
        return self._data[index]

    def compact(self, offset: int) -> int:
        """
        Discard bytes [0, offset) and shift [offset, write_pos) to 0.

        Args:
            offset: First byte to keep

        Returns:
            Number of bytes kept.
        """
        if not 0 <= offset <= self._write_pos:
            raise IndexError(
                f"Compaction offset {offset} outside [0, {self._write_pos}]"
            )
        kept = self._write_pos - offset
        if offset:
            self._data[0:kept] = self._data[offset:self._write_pos]
            self._compactions += 1
        self._write_pos = kept
        return kept

    def clear(self) -> int:
        """
        Drop all pending data.

        Returns:
            Number of bytes dropped.
        """
        dropped = self._write_pos
        self._write_pos = 0
        self._resets += 1
        return dropped

    def metrics(self) -> dict:
        """
        Get buffer metrics for observability.

        Returns:
            Dict with capacity, pending, compactions, resets
        """
        return {
            "capacity": self._capacity,
            "pending": self._write_pos,
            "compactions": self._compactions,
            "resets": self._resets,
        }
