"""
Stream Client
=============

Async MJPEG-over-HTTP client driven by a connection state machine.

This client:
    - Opens the stream URL and classifies the body from its Content-Type
    - Reads the body chunk by chunk into a fixed-capacity ReadBuffer
    - Confirms the real boundary against the first body bytes
    - Extracts JPEG frames and emits independently owned copies
    - Reconnects from scratch after every failure

Example:
    client = MjpegStreamClient("http://camera.local/video.mjpg")
    client.on_frame.subscribe(handle_jpeg)
    client.on_error.subscribe(lambda description: print(description))

    client.start()
    ...
    await client.stop()

Design Rules:
    - One control loop task per client; it is the only writer of state,
      buffer and parser cursors
    - stop(), pause() and unpause() are signals observed at the start of
      a tick; the tick in progress always completes first
    - Frame emission is synchronous with parsing (no internal queue)
    - The connection is released on every exit path
    - Commands must be called from the event loop running the client
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Optional, Union

from mjpeg_stream.config import StreamSource
from mjpeg_stream.errors import StreamConfigError, StreamEndedError
from mjpeg_stream.models.state import ConnectionState, FinishReason
from mjpeg_stream.stream.boundary import confirm_boundary, parse_content_type
from mjpeg_stream.stream.buffer import ReadBuffer
from mjpeg_stream.stream.events import EventHook
from mjpeg_stream.stream.extractor import ParserState, extract_frames, make_room
from mjpeg_stream.stream.transport import HttpxTransport, StreamResponse, Transport


logger = logging.getLogger(__name__)

_PAUSE = "pause"
_UNPAUSE = "unpause"


class MjpegStreamClient:
    """
    MJPEG stream client.

    Events:
        on_frame(data: bytes, index: int): one call per extracted JPEG
        on_error(description: str): connect or read fault (not clean end)
        on_finished(reason: FinishReason): control loop exited

    Attributes:
        source: Immutable stream configuration
        state: Current ConnectionState
        is_running: Whether the control loop is active
    """

    def __init__(
        self,
        source: Union[str, StreamSource],
        transport: Optional[Transport] = None,
    ) -> None:
        """
        Initialize stream client.

        Args:
            source: Stream URL, or a full StreamSource
            transport: Network capability (default: HttpxTransport)
        """
        if isinstance(source, str):
            source = StreamSource(url=source)

        self._source = source
        self._transport: Transport = transport or HttpxTransport(
            timeout=source.request_timeout_seconds
        )

        self.on_frame = EventHook("frame")
        self.on_error = EventHook("error")
        self.on_finished = EventHook("finished")

        # Owned by the control loop
        self._state = ConnectionState.CONNECTING
        self._buffer = ReadBuffer(source.buffer_capacity)
        self._parser = ParserState()
        self._response: Optional[StreamResponse] = None
        self._declared_boundary: bytes = b""
        self._boundary: bytes = b""
        self._boundary_confirmed: bool = False
        self._handlers = {
            ConnectionState.CONNECTING: self._connect,
            ConnectionState.WORKING: self._work,
            ConnectionState.ERROR_CONNECTING: self._recover,
            ConnectionState.ERROR_WORKING: self._recover,
            ConnectionState.PAUSED: self._paused,
        }

        # Signals from callers
        self._commands: Deque[str] = deque()
        self._stop_event = asyncio.Event()
        self._wake_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        self._running: bool = False

        # Counters
        self._frames_received: int = 0
        self._bytes_received: int = 0
        self._frame_index: int = 0
        self._total_bytes: int = 0
        self._reconnect_count: int = 0
        self._consecutive_failures: int = 0
        self._overflow_resets: int = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def source(self) -> StreamSource:
        return self._source

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running or (self._task is not None and not self._task.done())

    @property
    def frames_received(self) -> int:
        """Frames extracted since the last read of this property."""
        frames = self._frames_received
        self._frames_received = 0
        return frames

    @property
    def bytes_received(self) -> int:
        """Body bytes read since the last read of this property."""
        received = self._bytes_received
        self._bytes_received = 0
        return received

    def metrics(self) -> dict:
        """
        Get client metrics for observability.

        Unlike frames_received, these counters never reset.
        """
        return {
            "state": self._state.value,
            "total_frames": self._frame_index,
            "total_bytes": self._total_bytes,
            "reconnect_count": self._reconnect_count,
            "overflow_resets": self._overflow_resets,
            "boundary": self._boundary.decode("ascii", "replace"),
            "buffer": self._buffer.metrics(),
        }

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def start(self) -> asyncio.Task:
        """
        Start the control loop as a background task.

        No-op if already running. Must be called from a running event loop.
        Commands queued while the loop was not running are discarded.

        Returns:
            The control loop task.

        Raises:
            StreamConfigError: If no source URL is configured.
        """
        if self._task is not None and not self._task.done():
            return self._task

        self._check_source()
        self._frames_received = 0
        self._commands.clear()
        self._stop_event.clear()
        self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self, timeout: Optional[float] = None) -> None:
        """
        Signal the control loop to exit and wait until it has.

        Args:
            timeout: Seconds to wait before cancelling the loop task.
                None waits for the current tick to finish however long.
                A cancelled loop still releases the connection and emits
                on_finished(STOPPED_BY_USER).
        """
        logger.info("MjpegStreamClient stopping...")
        self._stop_event.set()
        self._wake_event.set()

        task = self._task
        if task is None or task.done() or task is asyncio.current_task():
            return

        try:
            await asyncio.wait_for(task, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Control loop did not stop within {timeout}s, cancelled")

    def pause(self) -> None:
        """
        Toggle between PAUSED and CONNECTING at the next tick.

        Pausing drops the connection. Pausing again does not resume the old
        connection; it reconnects from scratch.
        """
        self._commands.append(_PAUSE)
        self._wake_event.set()

    def unpause(self) -> None:
        """Leave PAUSED at the next tick by reconnecting. Ignored otherwise."""
        self._commands.append(_UNPAUSE)
        self._wake_event.set()

    # -------------------------------------------------------------------------
    # Control loop
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """
        Run the control loop until stop() is called.

        Raises:
            StreamConfigError: If no source URL is configured.
        """
        self._check_source()
        self._running = True
        reason = FinishReason.STOPPED_BY_USER

        # Every run starts from a fresh connection
        self._state = ConnectionState.CONNECTING
        self._reset_parser()
        self._consecutive_failures = 0

        logger.info(f"MjpegStreamClient starting, connecting to {self._source.url}")

        try:
            while not self._stop_event.is_set():
                finished = await self.step()
                if finished is not None:
                    reason = finished
                    break
        except asyncio.CancelledError:
            logger.warning("MjpegStreamClient control loop cancelled")
            raise
        finally:
            await self._close_session()
            self._commands.clear()
            self._running = False
            self._stop_event.clear()
            logger.info(f"MjpegStreamClient stopped ({reason.value})")
            await self.on_finished.emit(reason)

    async def step(self) -> Optional[FinishReason]:
        """
        Run one tick: apply pending commands, then act on the current state.

        Returns:
            A FinishReason if the loop must exit, None otherwise.
        """
        await self._apply_commands()
        return await self._handlers[self._state]()

    async def _apply_commands(self) -> None:
        while self._commands:
            command = self._commands.popleft()
            if command == _PAUSE:
                if self._state is ConnectionState.PAUSED:
                    self._set_state(ConnectionState.CONNECTING)
                else:
                    await self._close_session()
                    self._set_state(ConnectionState.PAUSED)
            elif command == _UNPAUSE:
                if self._state is ConnectionState.PAUSED:
                    self._set_state(ConnectionState.CONNECTING)
                else:
                    logger.debug(f"unpause ignored in state {self._state.value}")

    async def _connect(self) -> None:
        self._reset_parser()
        logger.info(f"Connecting to {self._source.url}")

        try:
            self._response = await self._transport.open(self._source.url)
            declared = parse_content_type(self._response.content_type)
        except Exception as e:
            await self._fail(e)
            return

        self._declared_boundary = declared
        self._boundary = declared
        self._boundary_confirmed = not declared
        logger.info(
            f"Connected to {self._source.url} "
            f"(boundary={declared.decode('ascii') or 'JPEG marker'})"
        )
        self._set_state(ConnectionState.WORKING)

    async def _work(self) -> None:
        size = self._source.read_chunk_size
        if make_room(self._buffer, self._parser, size):
            self._overflow_resets += 1
            logger.warning(
                f"No frame boundary within {self._buffer.capacity} bytes, "
                f"dropped pending data (reset #{self._overflow_resets})"
            )

        try:
            data = await self._response.read(size)
            if not data:
                raise StreamEndedError()
            self._buffer.append(data)
        except StreamEndedError:
            logger.info("Stream ended, reconnecting")
            await self._close_session()
            self._set_state(ConnectionState.ERROR_WORKING)
            return
        except Exception as e:
            await self._fail(e)
            return

        self._bytes_received += len(data)
        self._total_bytes += len(data)

        if not self._boundary_confirmed:
            actual = confirm_boundary(self._buffer, self._declared_boundary)
            if actual is None:
                return
            self._boundary = actual
            self._boundary_confirmed = True

        for frame in extract_frames(self._buffer, self._parser, self._boundary):
            index = self._frame_index
            self._frame_index += 1
            self._frames_received += 1
            self._consecutive_failures = 0
            logger.debug(f"Frame {index}: {len(frame)} bytes")
            await self.on_frame.emit(frame, index)

    async def _recover(self) -> Optional[FinishReason]:
        limit = self._source.max_reconnect_attempts
        if limit and self._consecutive_failures >= limit:
            logger.error(f"Max reconnect attempts ({limit}) exceeded")
            if self._state is ConnectionState.ERROR_WORKING:
                return FinishReason.END_OF_STREAM
            return FinishReason.SOURCE_ERROR

        self._consecutive_failures += 1
        self._reconnect_count += 1
        delay = self._source.reconnect_delay_seconds
        logger.info(
            f"Reconnecting in {delay:.2f}s (attempt {self._reconnect_count})"
        )
        await self._idle(delay)
        self._set_state(ConnectionState.CONNECTING)
        return None

    async def _paused(self) -> None:
        await self._idle(self._source.pause_poll_seconds)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _fail(self, error: Exception) -> None:
        description = str(error) or type(error).__name__
        logger.error(f"Stream error ({self._state.value}): {description}")
        await self._close_session()
        self._set_state(ConnectionState.ERROR_CONNECTING)
        await self.on_error.emit(description)

    async def _idle(self, seconds: float) -> None:
        """Sleep, waking early on stop() or a pending command."""
        self._wake_event.clear()
        if self._commands or self._stop_event.is_set():
            return
        if seconds <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._wake_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def _close_session(self) -> None:
        response, self._response = self._response, None
        if response is None:
            return
        try:
            await response.aclose()
        except Exception as e:
            logger.warning(f"Error closing stream response: {e}")
        logger.debug("Connection released")

    def _reset_parser(self) -> None:
        self._buffer.clear()
        self._parser.reset()
        self._declared_boundary = b""
        self._boundary = b""
        self._boundary_confirmed = False

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self._state:
            logger.info(f"State {self._state.value} -> {state.value}")
        self._state = state

    def _check_source(self) -> None:
        if not self._source.url.strip():
            raise StreamConfigError("Video source is not specified")
