"""
Websocket transport to the collecting server.
"""

import asyncio
import logging
from typing import Callable, Protocol
from urllib.parse import urlsplit, urlunsplit

from websockets.asyncio.client import ClientConnection, connect

logger = logging.getLogger(__name__)

SCHEME_UPGRADES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


class Transport(Protocol):
    """A live connection attempt. Callbacks are delivered on the event loop."""

    def send(self, text: str) -> None: ...

    def close(self) -> None: ...


TransportFactory = Callable[
    [str, Callable[[], None], Callable[[str], None], Callable[[], None]],
    Transport,
]


def endpoint_from_origin(origin: str) -> str:
    """
    Derive the websocket endpoint from a page origin.

    Same host and port, upgraded scheme (http -> ws, https -> wss), root path.

    Raises:
        ValueError: if the origin has no host or an unsupported scheme
    """
    parts = urlsplit(origin)
    scheme = SCHEME_UPGRADES.get(parts.scheme.lower())
    if scheme is None or not parts.netloc:
        raise ValueError(f"Cannot derive websocket endpoint from origin {origin!r}")
    return urlunsplit((scheme, parts.netloc, "", "", ""))


class WebSocketTransport:
    """
    One websocket connection attempt.

    Connects in a background task on the running loop. Outbound text is
    accepted synchronously into a FIFO outbox and written by a single writer
    task, so frames leave in the order `send` was called.

    `on_close` fires exactly once, whether the attempt failed, the server
    closed, or the network dropped.
    """

    def __init__(
        self,
        url: str,
        on_open: Callable[[], None],
        on_message: Callable[[str], None],
        on_close: Callable[[], None],
    ):
        self.url = url
        self._on_open = on_open
        self._on_message = on_message
        self._on_close = on_close
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._open = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def is_open(self) -> bool:
        return self._open

    def send(self, text: str) -> None:
        """Accept a text frame for delivery."""
        if not self._open:
            raise ConnectionError(f"Websocket to {self.url} is not open")
        self._outbox.put_nowait(text)

    def close(self) -> None:
        """Abandon the connection."""
        self._task.cancel()

    async def _run(self) -> None:
        try:
            async with connect(self.url) as websocket:
                self._open = True
                self._on_open()
                writer = asyncio.create_task(self._write(websocket))
                try:
                    async for message in websocket:
                        if isinstance(message, bytes):
                            message = message.decode("utf-8", errors="replace")
                        self._on_message(message)
                finally:
                    writer.cancel()
        except asyncio.CancelledError:
            logger.debug(f"Websocket to {self.url} cancelled")
        except Exception as e:
            logger.debug(f"Websocket to {self.url} failed: {e}")
        finally:
            self._open = False
            self._on_close()

    async def _write(self, websocket: ClientConnection) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await websocket.send(text)
            except Exception as e:
                # Reader loop sees the same closure and reports it
                logger.debug(f"Error writing to {self.url}: {e}")
                return


def websocket_transport(
    url: str,
    on_open: Callable[[], None],
    on_message: Callable[[str], None],
    on_close: Callable[[], None],
) -> WebSocketTransport:
    """Default transport factory."""
    return WebSocketTransport(url, on_open, on_message, on_close)
