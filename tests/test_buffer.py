"""
Read Buffer Tests
=================
"""

import pytest

from mjpeg_stream.stream.buffer import BufferOverflowError, ReadBuffer


class TestReadBuffer:
    """Fixed-capacity storage, cursors and compaction."""

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            ReadBuffer(0)

    def test_append_advances_write_pos(self):
        buffer = ReadBuffer(16)
        assert buffer.append(b"abc") == 3
        assert buffer.write_pos == 3
        assert buffer.free == 13

    def test_append_past_capacity_raises(self):
        buffer = ReadBuffer(4)
        buffer.append(b"abc")
        with pytest.raises(BufferOverflowError):
            buffer.append(b"de")
        assert buffer.write_pos == 3

    def test_find_ignores_stale_bytes_past_write_pos(self):
        buffer = ReadBuffer(16)
        buffer.append(b"xxmarker")
        buffer.compact(8)
        buffer.append(b"mar")
        assert buffer.find(b"marker") == -1
        assert buffer.find(b"mar") == 0

    def test_find_empty_pattern(self):
        buffer = ReadBuffer(8)
        buffer.append(b"abc")
        assert buffer.find(b"") == -1

    def test_compact_shifts_tail_to_zero(self):
        buffer = ReadBuffer(16)
        buffer.append(b"0123456789")
        assert buffer.compact(6) == 4
        assert buffer.copy(0, len(buffer)) == b"6789"
        assert buffer.free == 12
        assert buffer.compactions == 1

    def test_compact_outside_pending_raises(self):
        buffer = ReadBuffer(16)
        buffer.append(b"abc")
        with pytest.raises(IndexError):
            buffer.compact(4)

    def test_copy_is_independent(self):
        buffer = ReadBuffer(16)
        buffer.append(b"frame")
        copied = buffer.copy(0, 5)
        buffer.compact(5)
        buffer.append(b"XXXXX")
        assert copied == b"frame"

    def test_copy_outside_pending_raises(self):
        buffer = ReadBuffer(16)
        buffer.append(b"abc")
        with pytest.raises(IndexError):
            buffer.copy(1, 4)

    def test_clear_keeps_capacity(self):
        buffer = ReadBuffer(16)
        buffer.append(b"abcdef")
        assert buffer.clear() == 6
        assert len(buffer) == 0
        assert buffer.capacity == 16
        assert buffer.metrics() == {
            "capacity": 16,
            "pending": 0,
            "compactions": 0,
            "resets": 1,
        }
