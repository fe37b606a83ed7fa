"""
Interaction log capture source.
Tails a JSONL file of recorded interactions and replays them as capture input.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .dom import Element, element_from_dict
from .source import Interaction, InteractionHandler, SyntheticDocument

logger = logging.getLogger(__name__)


class InteractionLogSource(FileSystemEventHandler):
    """
    Capture source fed by a JSONL interaction log.

    Each line is one record:
        {"kind": "click", "target": {"tag": "button", "attributes": {...}, ...}}

    Targets with an `id` attribute are the same element across records, so a
    series of input records for one field updates a single element. File
    events arrive on the watchdog observer thread and are handed to the
    event loop before any line is read or dispatched.
    """

    def __init__(self, log_path: Path, from_start: bool = True):
        """
        Initialize interaction log source.

        Args:
            log_path: Path to JSONL interaction log
            from_start: Replay lines already in the file on start
        """
        self.log_path = Path(log_path).resolve()
        self.document = SyntheticDocument()
        self._elements: Dict[str, Element] = {}
        self._offset = 0
        self._observer: Optional[Observer] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        if not from_start and self.log_path.exists():
            self._offset = self.log_path.stat().st_size

    def on_interaction(self, kind: str, handler: InteractionHandler) -> Callable[[], None]:
        return self.document.on_interaction(kind, handler)

    def start(self) -> None:
        """Start watching. Must be called from the event loop thread."""
        self._loop = asyncio.get_running_loop()
        self._observer = Observer()
        self._observer.schedule(self, path=str(self.log_path.parent), recursive=False)
        self._observer.start()
        self._loop.call_soon(self.read_new_lines)

    def stop(self) -> None:
        """Stop watching."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def on_modified(self, event):
        """Handle file modification events."""
        self._schedule_read(event)

    def on_created(self, event):
        """Handle file creation events."""
        self._schedule_read(event)

    def _schedule_read(self, event) -> None:
        if event.is_directory or self._loop is None:
            return

        if Path(event.src_path).resolve() != self.log_path:
            return

        self._loop.call_soon_threadsafe(self.read_new_lines)

    def read_new_lines(self) -> int:
        """
        Dispatch every complete line appended since the last read.

        Returns:
            Number of lines dispatched
        """
        try:
            with open(self.log_path, "rb") as f:
                if f.seek(0, 2) < self._offset:
                    # Truncated or replaced, start over
                    self._offset = 0
                f.seek(self._offset)
                chunk = f.read()
        except FileNotFoundError:
            return 0
        except OSError as e:
            logger.debug(f"Error reading interaction log: {e}")
            return 0

        # Leave a trailing partial line for the next read
        end = chunk.rfind(b"\n")
        if end < 0:
            return 0
        self._offset += end + 1

        dispatched = 0
        for line in chunk[:end].decode("utf-8", errors="replace").split("\n"):
            if self.dispatch_line(line) is not None:
                dispatched += 1
        return dispatched

    def dispatch_line(self, line: str) -> Optional[Interaction]:
        """
        Parse one JSONL record and dispatch it.

        Returns:
            The dispatched interaction, or None for blank or malformed lines
        """
        line = line.strip()
        if not line:
            return None

        try:
            record = json.loads(line)
            kind = record["kind"]
            target = self._resolve_target(record["target"])
        except json.JSONDecodeError as e:
            logger.debug(f"Invalid JSON in interaction log line: {e}")
            return None
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.debug(f"Invalid interaction record: {e}")
            return None

        return self.document.dispatch(kind, target)

    def _resolve_target(self, data: Dict[str, Any]) -> Element:
        element = element_from_dict(data)
        if not element.id:
            return element

        known = self._elements.get(element.id)
        if known is None:
            self._elements[element.id] = element
            return element

        known.attributes.update(element.attributes)
        if "text" in data:
            known.text = element.text
        if "value" in data:
            known.value = element.value
        return known
