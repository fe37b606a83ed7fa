"""
Unit tests for the document model.
"""

import pytest

from brainstorm.capture.dom import Element, element_from_dict, form_data


class TestElement:
    """Test Element."""

    def test_closest_is_inclusive(self):
        """Test closest checks the element itself first."""
        button = Element("button")
        assert button.closest(lambda e: e.tag == "button") is button

    def test_closest_walks_up(self):
        """Test closest finds the nearest matching ancestor."""
        outer = Element("section", {"id": "outer"})
        inner = outer.append(Element("section", {"id": "inner"}))
        leaf = inner.append(Element("em"))

        assert leaf.closest(lambda e: e.tag == "section") is inner
        assert leaf.closest(lambda e: e.tag == "form") is None

    def test_append_reparents(self):
        """Test appending moves an element from its old parent."""
        a, b = Element("div"), Element("div")
        child = a.append(Element("span"))
        b.append(child)

        assert a.children == []
        assert child.parent is b

    def test_tag_lowercased(self):
        assert Element("BUTTON").tag == "button"


class TestFormData:
    """Test FormData-style serialization."""

    def test_controls_in_document_order(self):
        """Test named controls are serialized, unnamed and disabled skipped."""
        form = Element("form")
        fieldset = form.append(Element("fieldset"))
        fieldset.append(Element("input", {"name": "a"}, value="1"))
        form.append(Element("textarea", {"name": "b"}, value="2"))
        form.append(Element("input", {}, value="unnamed"))
        form.append(Element("input", {"name": "c", "disabled": ""}, value="3"))
        form.append(Element("select", {"name": "d"}, value="4"))

        assert form_data(form) == [("a", "1"), ("b", "2"), ("d", "4")]

    def test_checkable_and_button_inputs(self):
        """Test checkboxes need `checked` and button-like inputs are skipped."""
        form = Element("form")
        form.append(Element("input", {"name": "agree", "type": "checkbox", "checked": ""}))
        form.append(Element("input", {"name": "spam", "type": "checkbox"}, value="yes"))
        form.append(Element("input", {"name": "go", "type": "submit"}, value="Send"))
        form.append(Element("input", {"name": "empty", "type": "text"}))

        assert form_data(form) == [("agree", "on"), ("empty", "")]


class TestElementFromDict:
    """Test building elements from records."""

    def test_with_parent_and_children(self):
        """Test nested records build a linked tree."""
        element = element_from_dict({
            "tag": "span",
            "text": "Pick ",
            "children": [{"tag": "b", "text": "me"}],
            "parent": {"tag": "div", "attributes": {"data-choice": "x"}},
        })

        assert element.text_content == "Pick me"
        assert element.parent.choice == "x"
        assert element.parent.children == [element]

    def test_values_stringified(self):
        element = element_from_dict({"tag": "input", "attributes": {"maxlength": 3}, "value": 42})

        assert element.get("maxlength") == "3"
        assert element.value == "42"

    def test_requires_tag(self):
        with pytest.raises(ValueError):
            element_from_dict({"text": "no tag"})
