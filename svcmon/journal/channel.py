"""
Bounded, closable channel between a producer thread and a consumer.
"""

import queue
import threading
from typing import Any, Generic, Iterator, Optional, Tuple, TypeVar

from ..errors import ChannelClosed

T = TypeVar("T")

_CLOSED = object()


class Channel(Generic[T]):
    """
    FIFO queue with a fixed capacity and an explicit close.

    send() blocks while the channel is full. After close(), receivers drain
    what is left and then see the channel as closed.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        # one extra slot so close() never blocks behind a full buffer
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=capacity + 1)
        self._slots = threading.Semaphore(capacity)
        self._closed = threading.Event()
        self._lock = threading.Lock()
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, item: T, timeout: Optional[float] = None) -> bool:
        """
        Put an item on the channel, waiting for room.

        Returns:
            bool: False if the timeout expired before there was room

        Raises:
            ChannelClosed: If the channel was closed
        """
        if self.closed:
            raise ChannelClosed("send on closed channel")
        if not self._slots.acquire(timeout=timeout):
            return False
        with self._lock:
            if self.closed:
                self._slots.release()
                raise ChannelClosed("send on closed channel")
            self._queue.put_nowait(item)
        return True

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self._closed.set()
            self._queue.put_nowait(_CLOSED)

    def receive(self, timeout: Optional[float] = None) -> Tuple[Optional[T], bool]:
        """
        Take the next item.

        Returns:
            (item, True) for an item, (None, False) once closed and drained

        Raises:
            queue.Empty: If the timeout expired with nothing available
        """
        if self._drained:
            return None, False
        item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            self._drained = True
            # leave the marker for any other receiver
            self._queue.put_nowait(_CLOSED)
            return None, False
        self._slots.release()
        return item, True

    def __iter__(self) -> Iterator[T]:
        while True:
            item, ok = self.receive()
            if not ok:
                return
            yield item
