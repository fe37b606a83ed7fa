"""
Capture sources: where interactions come from.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Protocol

from .dom import Element

logger = logging.getLogger(__name__)

CLICK = "click"
SUBMIT = "submit"
INPUT = "input"
CHANGE = "change"


class Interaction:
    """One raw interaction delivered to capture handlers."""

    def __init__(self, kind: str, target: Element):
        self.kind = kind
        self.target = target
        self.default_prevented = False

    def __repr__(self):
        return f"<Interaction {self.kind} on {self.target!r}>"

    def prevent_default(self) -> None:
        self.default_prevented = True


InteractionHandler = Callable[[Interaction], None]


class CaptureSource(Protocol):
    def on_interaction(self, kind: str, handler: InteractionHandler) -> Callable[[], None]:
        """Register handler for `kind`; returns a callable that unregisters it."""
        ...


class SyntheticDocument:
    """
    In-memory capture source.

    Handlers run in registration order. A failing handler is logged and
    does not stop the others.
    """

    def __init__(self):
        self._handlers: Dict[str, List[InteractionHandler]] = defaultdict(list)

    def on_interaction(self, kind: str, handler: InteractionHandler) -> Callable[[], None]:
        self._handlers[kind].append(handler)

        def unsubscribe():
            if handler in self._handlers[kind]:
                self._handlers[kind].remove(handler)

        return unsubscribe

    def listener_count(self, kind: str) -> int:
        return len(self._handlers.get(kind, []))

    def dispatch(self, kind: str, target: Element) -> Interaction:
        """Deliver an interaction to every handler for its kind."""
        interaction = Interaction(kind, target)
        for handler in list(self._handlers.get(kind, [])):
            try:
                handler(interaction)
            except Exception as e:
                logger.error(f"Error in {kind} handler: {e}", exc_info=True)
        return interaction

    def click(self, target: Element) -> Interaction:
        return self.dispatch(CLICK, target)

    def submit(self, form: Element) -> Interaction:
        return self.dispatch(SUBMIT, form)

    def input(self, target: Element, value: Optional[str] = None) -> Interaction:
        """Set the control's value (if given) and fire an input interaction."""
        if value is not None:
            target.value = value
        return self.dispatch(INPUT, target)
