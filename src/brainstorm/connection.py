"""
Reconnecting connection to the collecting server.
"""

import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from .config import config
from .event_queue import EventQueue
from .events import RELOAD, Event, decode_control_message, epoch_ms
from .scheduling import LoopScheduler, Scheduler, TimerHandle
from .transport import Transport, TransportFactory, websocket_transport

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


class ConnectionManager:
    """
    Owns the transport and the pending event queue.

    DISCONNECTED -> CONNECTING -> OPEN -> DISCONNECTED, then CONNECTING again
    after a fixed delay. Retries forever until `close()`.
    """

    def __init__(
        self,
        url: str,
        on_reload: Callable[[], None],
        transport_factory: Optional[TransportFactory] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], int]] = None,
        reconnect_delay_ms: Optional[int] = None,
    ):
        """
        Initialize connection manager.

        Args:
            url: Websocket endpoint
            on_reload: Called when the server sends a reload signal
            transport_factory: Builds one transport per connection attempt
            scheduler: Timer source for the reconnect delay
            clock: Returns milliseconds since epoch
            reconnect_delay_ms: Fixed wait between close and the next attempt
        """
        self.url = url
        self.on_reload = on_reload
        self.transport_factory = transport_factory or websocket_transport
        self.scheduler = scheduler or LoopScheduler()
        self.clock = clock or epoch_ms
        delay_ms = reconnect_delay_ms if reconnect_delay_ms is not None else config.reconnect_delay_ms
        self.reconnect_delay = delay_ms / 1000.0  # Convert to seconds

        self.queue = EventQueue()
        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0

        self._transport: Optional[Transport] = None
        self._generation = 0
        self._reconnect_handle: Optional[TimerHandle] = None
        self._closed = False
        self._constructing = False
        self._open_pending = False

    @property
    def closed(self) -> bool:
        return self._closed

    def connect(self) -> None:
        """Start a new connection attempt. No-op unless disconnected."""
        if self._closed or self.state != ConnectionState.DISCONNECTED:
            return

        self._reconnect_handle = None
        self._generation += 1
        generation = self._generation
        self.state = ConnectionState.CONNECTING
        self.attempts += 1

        self._open_pending = False
        self._constructing = True
        try:
            transport = self.transport_factory(
                self.url,
                lambda: self._handle_open(generation),
                lambda text: self._handle_message(generation, text),
                lambda: self._handle_close(generation),
            )
        except Exception as e:
            logger.debug(f"Connection attempt to {self.url} failed to start: {e}")
            self._handle_close(generation)
            return
        finally:
            self._constructing = False

        # Not kept if it already reported close during construction
        if not self._is_current(generation) or self.state != ConnectionState.CONNECTING:
            return
        self._transport = transport

        # Open reported from inside the factory is handled once the transport is held
        if self._open_pending:
            self._open_pending = False
            self._handle_open(generation)

    def send(self, event: Mapping[str, Any]) -> Optional[Event]:
        """
        Stamp and transmit an event, or queue it until the connection opens.

        Never raises; events that cannot be built or serialized are dropped.

        Returns:
            The stamped event, or None if it was dropped
        """
        if not isinstance(event, Mapping):
            logger.warning(f"Dropping event that is not a mapping: {type(event).__name__}")
            return None

        if self._closed:
            logger.debug(f"Dropping event sent after close: {event.get('type')!r}")
            return None

        try:
            stamped = Event.stamp(event, self.clock())
            stamped.to_json()
        except (TypeError, ValueError) as e:
            logger.warning(f"Dropping event {event.get('type')!r}: {e}")
            return None

        # Always behind anything still queued, so delivery keeps send order
        self.queue.enqueue(stamped)
        if self.state == ConnectionState.OPEN:
            self._flush()

        return stamped

    def close(self) -> None:
        """Tear down: cancel the pending reconnect and close the transport."""
        self._closed = True
        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None
        if self._transport is not None:
            transport, self._transport = self._transport, None
            transport.close()
        self.state = ConnectionState.DISCONNECTED

    def _transmit(self, event: Event) -> None:
        self._transport.send(event.to_json())

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    def _flush(self) -> None:
        try:
            self.queue.flush_into(self._transmit)
        except Exception as e:
            logger.debug(f"Flush interrupted with {len(self.queue)} events left: {e}")

    def _handle_open(self, generation: int) -> None:
        if not self._is_current(generation) or self.state != ConnectionState.CONNECTING:
            return

        if self._constructing:
            self._open_pending = True
            return

        self.state = ConnectionState.OPEN
        logger.debug(f"Connected to {self.url}, flushing {len(self.queue)} queued events")
        self._flush()

    def _handle_message(self, generation: int, text: str) -> None:
        if not self._is_current(generation) or self.state != ConnectionState.OPEN:
            return

        message = decode_control_message(text)
        if message is None or message["type"] != RELOAD:
            return

        try:
            self.on_reload()
        except Exception as e:
            logger.error(f"Error handling reload signal: {e}", exc_info=True)

    def _handle_close(self, generation: int) -> None:
        if not self._is_current(generation) or self.state == ConnectionState.DISCONNECTED:
            return

        self._transport = None
        self.state = ConnectionState.DISCONNECTED
        logger.debug(f"Connection to {self.url} closed, retrying in {self.reconnect_delay}s")
        self._reconnect_handle = self.scheduler.call_later(self.reconnect_delay, self.connect)
