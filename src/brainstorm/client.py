"""
Client handle: wires capture to the connection and exposes send/choice.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from .capture.dispatcher import CaptureDispatcher
from .capture.source import CaptureSource
from .config import Config, config as default_config
from .connection import ConnectionManager, ConnectionState
from .events import Event, build_choice_event
from .scheduling import LoopScheduler, Scheduler
from .transport import TransportFactory, endpoint_from_origin

logger = logging.getLogger(__name__)


class Page(Protocol):
    """The host page: where the client is embedded."""

    origin: str

    def reload(self) -> None: ...


class BrainstormClient:
    """
    One telemetry client instance embedded in a page.

    Events sent before `start()` are queued and delivered once the
    connection opens.
    """

    def __init__(
        self,
        page: Page,
        capture_source: CaptureSource,
        config: Optional[Config] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], int]] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        """
        Initialize client.

        Args:
            page: Host page, provides the origin and the reload side effect
            capture_source: Interactions to capture
            config: Timing configuration (defaults to the global config)
            scheduler: Timer source for reconnect and debounce
            clock: Returns milliseconds since epoch
            transport_factory: Builds one transport per connection attempt
        """
        self.page = page
        self.config = config or default_config
        scheduler = scheduler or LoopScheduler()

        self.connection = ConnectionManager(
            url=endpoint_from_origin(page.origin),
            on_reload=page.reload,
            transport_factory=transport_factory,
            scheduler=scheduler,
            clock=clock,
            reconnect_delay_ms=self.config.reconnect_delay_ms,
        )
        self.dispatcher = CaptureDispatcher(
            source=capture_source,
            send=self.connection.send,
            scheduler=scheduler,
            input_debounce_ms=self.config.input_debounce_ms,
        )
        self._started = False

    @property
    def state(self) -> ConnectionState:
        return self.connection.state

    @property
    def url(self) -> str:
        return self.connection.url

    def start(self) -> None:
        """Attach capture listeners and open the connection."""
        if self._started or self.connection.closed:
            return
        self._started = True
        self.dispatcher.attach()
        self.connection.connect()
        logger.debug(f"Telemetry client started for {self.url}")

    def dispose(self) -> None:
        """Detach listeners, stop reconnecting and close the connection."""
        self.dispatcher.detach()
        self.connection.close()
        logger.debug(f"Telemetry client for {self.url} disposed")

    def send(self, event: Mapping[str, Any]) -> Optional[Event]:
        """Send a custom event. Returns the stamped event, or None if dropped."""
        return self.connection.send(event)

    def choice(self, value: Any, metadata: Optional[Mapping[str, Any]] = None) -> Optional[Event]:
        """Send {type: "choice", value, **metadata}."""
        return self.connection.send(build_choice_event(value, metadata))


def create_client(page: Page, capture_source: CaptureSource, **kwargs) -> BrainstormClient:
    """Build and start a client; the returned handle is the public API."""
    client = BrainstormClient(page, capture_source, **kwargs)
    client.start()
    return client
