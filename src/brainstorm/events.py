"""
Event records sent to the collecting server, and inbound control messages.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Event types produced by auto-capture and the public API."""

    CLICK = "click"
    SUBMIT = "submit"
    INPUT = "input"
    CHOICE = "choice"


RELOAD = "reload"


def epoch_ms() -> int:
    """Milliseconds since epoch."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Event:
    """
    A stamped event, immutable once built.

    `fields` holds the type-specific payload; `type` and `timestamp` are
    never part of it.
    """

    type: str
    timestamp: int
    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def stamp(cls, event: Mapping[str, Any], timestamp: int) -> "Event":
        """
        Build an event from a caller mapping, overwriting any timestamp.

        Raises:
            ValueError: if the mapping has no non-empty string `type`
        """
        event_type = event.get("type")
        if not isinstance(event_type, str) or not event_type:
            raise ValueError(f"Event type must be a non-empty string, got {event_type!r}")

        payload = {k: v for k, v in event.items() if k not in ("type", "timestamp")}
        return cls(type=event_type, timestamp=timestamp, fields=payload)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **self.fields, "timestamp": self.timestamp}

    def to_json(self) -> str:
        """Wire text. Raises TypeError/ValueError for non-serializable fields."""
        return json.dumps(self.to_dict())


def build_click_event(text: str, choice: Optional[str], element_id: Optional[str],
                      class_name: Optional[str]) -> Dict[str, Any]:
    """Build a click event payload."""
    return {
        "type": EventType.CLICK.value,
        "text": text,
        "choice": choice,
        "id": element_id,
        "className": class_name,
    }


def build_submit_event(form_id: Optional[str], form_name: Optional[str],
                       data: Dict[str, str]) -> Dict[str, Any]:
    """Build a form submission event payload."""
    return {
        "type": EventType.SUBMIT.value,
        "formId": form_id,
        "formName": form_name,
        "data": data,
    }


def build_input_event(name: Optional[str], element_id: Optional[str],
                      value: Optional[str], input_type: str) -> Dict[str, Any]:
    """Build an input change event payload."""
    return {
        "type": EventType.INPUT.value,
        "name": name,
        "id": element_id,
        "value": value,
        "inputType": input_type,
    }


def build_choice_event(value: Any, metadata: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Metadata keys win over `type` and `value` when they collide."""
    return {"type": EventType.CHOICE.value, "value": value, **(metadata or {})}


def decode_control_message(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse an inbound server message.

    Returns:
        The decoded message, or None if it is not a JSON object with a
        string `type`.
    """
    try:
        message = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.debug(f"Dropping malformed control message: {e}")
        return None

    if not isinstance(message, dict) or not isinstance(message.get("type"), str):
        logger.debug(f"Dropping control message without a type: {text!r}")
        return None

    return message
