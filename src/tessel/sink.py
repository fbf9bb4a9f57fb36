"""Cross-thread callback queue.

Any thread may :meth:`CallbackSink.send` a callback; only the event-loop
thread drains the :class:`CallbackQueue` and runs them, strictly FIFO.
Every send also wakes the backend so a blocked poll returns promptly.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable, Iterator

from tessel.event import Callback

logger = logging.getLogger(__name__)

__all__ = [
    "CallbackQueue",
    "CallbackSink",
]


class CallbackQueue:
    """Consumer side, owned by the ``TUI``."""

    def __init__(self, waker: Callable[[], None] | None = None) -> None:
        self._queue: queue.SimpleQueue[Callback] = queue.SimpleQueue()
        self._waker = waker

    def put(self, callback: Callback) -> None:
        self._queue.put(callback)
        waker = self._waker
        if waker is not None:
            waker()

    def sink(self) -> CallbackSink:
        return CallbackSink(self)

    def __len__(self) -> int:
        return self._queue.qsize()

    def drain(self) -> Iterator[Callback]:
        """Yield queued callbacks until the queue is empty.

        Callbacks queued while draining (for example by a callback itself)
        are yielded in the same pass.
        """
        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                return
            yield callback


class CallbackSink:
    """Producer handle; cheap to clone and safe to use from any thread."""

    def __init__(self, target: CallbackQueue) -> None:
        self._target = target

    def send(self, callback: Callback) -> None:
        """Queue *callback* to run on the event-loop thread with the ``TUI``."""
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")
        self._target.put(callback)

    __call__ = send

    def clone(self) -> CallbackSink:
        return CallbackSink(self._target)
