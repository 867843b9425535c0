"""Editability guard for state-mutating operations.

An item's `editable` flag is supplied from outside and never changed by the
engine. Structural and status edits on a non-editable item are rejected with
an item:permission-denied event. Collaborative metadata (comments, worklog,
tags, assignee, priority, blocked, dates) is exempt.
"""

import logging
from typing import Callable, Optional

from outline.events import EventChannel
from outline.lib.constants import REASON_NOT_EDITABLE
from outline.lib.types import Outcome
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)

# Actions that require item.editable
GUARDED_ACTIONS = frozenset({
    "cycle_forward",
    "cycle_backward",
    "toggle",
    "set_status",
    "indent",
    "outdent",
    "move",
    "move_up",
    "move_down",
    "archive",
    "begin_edit",
    "save_edit",
})


class PermissionGuard:
    """Gates operations on the target item's editable flag."""

    def __init__(self, tree: ItemTree, channel: EventChannel):
        self.tree = tree
        self.channel = channel

    def is_editable(self, item_id: str) -> bool:
        return self.tree.get(item_id).editable

    def allows(self, action: str, item_id: Optional[str]) -> bool:
        """True if action may run on item_id. Exempt actions always may."""
        if action not in GUARDED_ACTIONS or item_id is None:
            return True
        return self.is_editable(item_id)

    def run(self, action: str, item_id: Optional[str], operation: Callable[..., Outcome], *args, **kwargs) -> Outcome:
        """Run operation(item_id, *args, **kwargs) if permitted.

        On rejection emits item:permission-denied {id, action} and performs no
        mutation.
        """
        if not self.allows(action, item_id):
            logger.info(f"[PERM] {item_id}: {action} denied, item is not editable")
            self.channel.permission_denied(item_id, action)
            return Outcome.denied(action, item_id, REASON_NOT_EDITABLE)
        return operation(item_id, *args, **kwargs)
