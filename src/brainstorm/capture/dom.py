"""
Minimal document model read by the capture dispatcher.
"""

from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

# Input types FormData never serializes
NON_DATA_INPUT_TYPES = {"submit", "button", "reset", "image", "file"}
CHECKABLE_INPUT_TYPES = {"checkbox", "radio"}
FORM_CONTROL_TAGS = {"input", "textarea", "select"}


class Element:
    """
    A document element: tag, attributes, own text, current value and tree links.
    """

    def __init__(
        self,
        tag: str,
        attributes: Optional[Dict[str, str]] = None,
        text: str = "",
        value: Optional[str] = None,
    ):
        self.tag = tag.lower()
        self.attributes: Dict[str, str] = dict(attributes or {})
        self.text = text
        self.value = value
        self.parent: Optional["Element"] = None
        self.children: List["Element"] = []

    def __repr__(self):
        return f"<Element {self.tag} id={self.id!r}>"

    def append(self, child: "Element") -> "Element":
        """Attach child as the last child; returns child."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def get(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def has(self, name: str) -> bool:
        return name in self.attributes

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("id")

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get("name")

    @property
    def class_name(self) -> Optional[str]:
        return self.attributes.get("class")

    @property
    def type(self) -> Optional[str]:
        return self.attributes.get("type")

    @property
    def choice(self) -> Optional[str]:
        """Value of the `data-choice` marker."""
        return self.attributes.get("data-choice")

    @property
    def text_content(self) -> str:
        """Own text followed by all descendant text, like DOM textContent."""
        return self.text + "".join(child.text_content for child in self.children)

    def ancestors(self) -> Iterator["Element"]:
        """This element, then each parent up to the root."""
        node: Optional[Element] = self
        while node is not None:
            yield node
            node = node.parent

    def closest(self, predicate: Callable[["Element"], bool]) -> Optional["Element"]:
        for node in self.ancestors():
            if predicate(node):
                return node
        return None

    def descendants(self) -> Iterator["Element"]:
        """Depth-first, document order."""
        for child in self.children:
            yield child
            yield from child.descendants()


def form_data(form: Element) -> List[Tuple[str, str]]:
    """
    Serialize a form's controls the way the browser's FormData does.

    Named, enabled controls in document order; checkboxes and radios only
    when checked (default value "on"); button-like and file inputs skipped.
    """
    entries = []
    for control in form.descendants():
        if control.tag not in FORM_CONTROL_TAGS:
            continue
        if not control.name or control.has("disabled"):
            continue

        input_type = (control.type or "").lower()
        if control.tag == "input" and input_type in NON_DATA_INPUT_TYPES:
            continue
        if control.tag == "input" and input_type in CHECKABLE_INPUT_TYPES:
            if not control.has("checked"):
                continue
            entries.append((control.name, control.value if control.value is not None else "on"))
            continue

        entries.append((control.name, control.value if control.value is not None else ""))
    return entries


def element_from_dict(data: Dict[str, Any]) -> Element:
    """
    Build an element from a JSON-compatible dict.

    Keys: `tag` (required), `attributes`, `text`, `value`, `children` (list
    of element dicts), `parent` (element dict the new element is appended to).

    Raises:
        ValueError: if `tag` is missing
    """
    tag = data.get("tag")
    if not isinstance(tag, str) or not tag:
        raise ValueError(f"Element needs a tag: {data!r}")

    value = data.get("value")
    element = Element(
        tag,
        attributes={k: str(v) for k, v in (data.get("attributes") or {}).items()},
        text=str(data.get("text") or ""),
        value=str(value) if value is not None else None,
    )

    for child in data.get("children") or []:
        element.append(element_from_dict(child))

    if data.get("parent"):
        element_from_dict(data["parent"]).append(element)

    return element
