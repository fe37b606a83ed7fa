"""
Unit tests for event records and control messages.
"""

import json

import pytest

from brainstorm.events import (
    Event,
    EventType,
    build_choice_event,
    build_click_event,
    decode_control_message,
)


class TestEvent:
    """Test Event."""

    def test_stamp_overwrites_caller_timestamp(self):
        """Test caller-supplied timestamp is replaced."""
        event = Event.stamp({"type": "custom", "timestamp": 1, "x": 2}, 5000)

        assert event.timestamp == 5000
        assert "timestamp" not in event.fields
        assert event.fields["x"] == 2

    def test_stamp_requires_type(self):
        """Test events without a type are rejected."""
        with pytest.raises(ValueError):
            Event.stamp({"value": 1}, 0)
        with pytest.raises(ValueError):
            Event.stamp({"type": ""}, 0)

    def test_fields_are_read_only(self):
        """Test an event cannot be changed after it is built."""
        payload = {"type": "custom", "a": 1}
        event = Event.stamp(payload, 10)
        payload["a"] = 2

        assert event.fields["a"] == 1
        with pytest.raises(TypeError):
            event.fields["a"] = 3

    def test_to_json_wire_shape(self):
        """Test wire text carries type, fields and timestamp."""
        event = Event.stamp(build_click_event("Go", "yes", None, "btn"), 42)

        assert json.loads(event.to_json()) == {
            "type": "click",
            "text": "Go",
            "choice": "yes",
            "id": None,
            "className": "btn",
            "timestamp": 42,
        }

    def test_to_json_rejects_unserializable(self):
        """Test non-serializable payloads raise TypeError."""
        event = Event.stamp({"type": "custom", "obj": object()}, 1)

        with pytest.raises(TypeError):
            event.to_json()


class TestChoiceEvent:
    """Test choice event building."""

    def test_metadata_merged(self):
        """Test metadata is flattened next to value."""
        assert build_choice_event("start", {"level": 1}) == {
            "type": EventType.CHOICE.value,
            "value": "start",
            "level": 1,
        }

    def test_metadata_collision_last_write_wins(self):
        """Test colliding metadata keys override type and value."""
        event = build_choice_event("start", {"value": "other", "type": "custom"})

        assert event == {"type": "custom", "value": "other"}

    def test_no_metadata(self):
        """Test choice without metadata."""
        assert build_choice_event("a") == {"type": "choice", "value": "a"}


class TestDecodeControlMessage:
    """Test inbound message decoding."""

    def test_reload(self):
        """Test reload message decodes."""
        assert decode_control_message('{"type": "reload"}') == {"type": "reload"}

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", '"reload"', '{"kind": "reload"}', '{"type": 3}'])
    def test_malformed_dropped(self, text):
        """Test malformed messages decode to None."""
        assert decode_control_message(text) is None
