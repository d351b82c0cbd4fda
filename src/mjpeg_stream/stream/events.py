"""
Event Hooks
===========

Per-event-kind callback registry.

The stream client has exactly one EventHook per event kind (frame, error,
finished). Callbacks run in subscription order, synchronously with the
control loop; a callback returning an awaitable is awaited before the
next one runs. A slow subscriber therefore slows the read loop.

Example:
    hook = EventHook("frame")
    unsubscribe = hook.subscribe(lambda data, index: print(index))
    await hook.emit(b"...", 0)
    unsubscribe()
"""

import inspect
import logging
from typing import Any, Callable, List


logger = logging.getLogger(__name__)


class EventHook:
    """
    Ordered list of callbacks for one event kind.

    Exceptions raised by a callback are logged and do not reach the
    emitter or the remaining callbacks.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._callbacks: List[Callable[..., Any]] = []

    def __len__(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[..., Any]) -> Callable[[], None]:
        """
        Register a callback.

        Args:
            callback: Sync function or coroutine function

        Returns:
            A function that removes this subscription.
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(callback)

        return unsubscribe

    def unsubscribe(self, callback: Callable[..., Any]) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    async def emit(self, *args: Any) -> None:
        for callback in list(self._callbacks):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Subscriber {callback!r} failed on {self.name} event")
