"""
Turns raw document interactions into telemetry events.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from ..config import config
from ..events import build_click_event, build_input_event, build_submit_event
from ..scheduling import LoopScheduler, PendingTimer, Scheduler
from .dom import FORM_CONTROL_TAGS, Element, form_data
from .source import CHANGE, CLICK, INPUT, SUBMIT, CaptureSource, Interaction


def is_interactive(element: Element) -> bool:
    """button, a, [data-choice], [role="button"], input[type="submit"]"""
    if element.tag in ("button", "a"):
        return True
    if element.has("data-choice"):
        return True
    if element.get("role") == "button":
        return True
    return element.tag == "input" and (element.type or "").lower() == "submit"


class CaptureDispatcher:
    """
    Listens for click, submit and input interactions and sends events.

    Input is debounced through one shared timer: any qualifying input
    restarts it, and only the last target's state at fire time is sent.
    """

    def __init__(
        self,
        source: CaptureSource,
        send: Callable[[Mapping[str, Any]], Any],
        scheduler: Optional[Scheduler] = None,
        input_debounce_ms: Optional[int] = None,
    ):
        """
        Initialize capture dispatcher.

        Args:
            source: Where interactions come from
            send: Receives each normalized event (ConnectionManager.send)
            scheduler: Timer source for the input debounce
            input_debounce_ms: Quiet window before an input event is sent
        """
        self.source = source
        self.send = send
        delay_ms = input_debounce_ms if input_debounce_ms is not None else config.input_debounce_ms
        self.input_timer = PendingTimer(scheduler or LoopScheduler(), delay_ms)
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)

    def attach(self) -> None:
        """Register listeners on the capture source."""
        if self.attached:
            return
        self._unsubscribers = [
            self.source.on_interaction(CLICK, self.handle_click),
            self.source.on_interaction(SUBMIT, self.handle_submit),
            self.source.on_interaction(INPUT, self.handle_input),
            self.source.on_interaction(CHANGE, self.handle_input),
        ]

    def detach(self) -> None:
        """Unregister listeners and drop any pending input event."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.input_timer.cancel()

    def handle_click(self, interaction: Interaction) -> None:
        target = interaction.target.closest(is_interactive)
        if target is None:
            return

        # Plain links navigate normally
        if target.tag == "a" and not target.choice:
            return

        interaction.prevent_default()
        self.send(build_click_event(
            text=target.text_content.strip(),
            choice=target.choice or None,
            element_id=target.id or None,
            class_name=target.class_name or None,
        ))

    def handle_submit(self, interaction: Interaction) -> None:
        interaction.prevent_default()
        form = interaction.target

        # Later duplicates overwrite earlier ones
        data: Dict[str, str] = {}
        for name, value in form_data(form):
            data[name] = value

        self.send(build_submit_event(
            form_id=form.id or None,
            form_name=form.name or None,
            data=data,
        ))

    def handle_input(self, interaction: Interaction) -> None:
        target = interaction.target
        if target.tag not in FORM_CONTROL_TAGS:
            return
        self.input_timer.schedule(lambda: self._emit_input(target))

    def _emit_input(self, target: Element) -> None:
        self.send(build_input_event(
            name=target.name or None,
            element_id=target.id or None,
            value=target.value,
            input_type=target.type or target.tag,
        ))
