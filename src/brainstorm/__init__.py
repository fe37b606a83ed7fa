"""
Brainstorm: page-embedded interaction telemetry client.
"""

__version__ = "0.1.0"

from .client import BrainstormClient, Page, create_client
from .connection import ConnectionManager, ConnectionState
from .event_queue import EventQueue
from .events import Event, EventType

__all__ = [
    "BrainstormClient",
    "Page",
    "create_client",
    "ConnectionManager",
    "ConnectionState",
    "EventQueue",
    "Event",
    "EventType",
]
