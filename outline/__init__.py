"""
Outline engine.

In-memory state for a hierarchical todo outline: the item tree, the status
state machine, hierarchy mutations, completion aggregates, the editability
guard and change notifications, behind a single operation dispatcher.
"""

from outline.events import Event, EventChannel
from outline.lib.config import Features, OutlineConfig, StatusLabel, config_from_dict, load_config
from outline.lib.types import ItemNotFound, Outcome, UnknownOperation
from outline.lib.validate import ValidationError
from outline.session import Session
from outline.tree.models import NO_LABEL, Item, Progress, StatusState

__all__ = [
    "Session",
    "Outcome",
    "Event",
    "EventChannel",
    "OutlineConfig",
    "Features",
    "StatusLabel",
    "config_from_dict",
    "load_config",
    "Item",
    "Progress",
    "StatusState",
    "NO_LABEL",
    "ItemNotFound",
    "UnknownOperation",
    "ValidationError",
]
