"""
Ordered buffer of events waiting for an open connection.
"""

from collections import deque
from typing import Callable, Deque, Iterator, List

from .events import Event


class EventQueue:
    """
    FIFO of pending events, unbounded and in-memory only.

    Insertion order is delivery order.
    """

    def __init__(self):
        self._events: Deque[Event] = deque()

    def enqueue(self, event: Event) -> None:
        """Append event to the tail."""
        self._events.append(event)

    def flush_into(self, transmit: Callable[[Event], None]) -> int:
        """
        Drain events head to tail through `transmit`.

        An event is removed only after `transmit` returns. If `transmit`
        raises, the failing event and everything behind it stay queued and
        the exception propagates.

        Returns:
            Number of events transmitted
        """
        sent = 0
        while self._events:
            transmit(self._events[0])
            self._events.popleft()
            sent += 1
        return sent

    def snapshot(self) -> List[Event]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.snapshot())
