"""
Capture components for document interaction telemetry.
"""

from .dom import Element, element_from_dict, form_data
from .source import CaptureSource, Interaction, SyntheticDocument
from .dispatcher import CaptureDispatcher, is_interactive
from .log_source import InteractionLogSource

__all__ = [
    "Element",
    "element_from_dict",
    "form_data",
    "CaptureSource",
    "Interaction",
    "SyntheticDocument",
    "CaptureDispatcher",
    "is_interactive",
    "InteractionLogSource",
]
