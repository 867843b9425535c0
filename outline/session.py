"""Outline session: one tree, its engines and a single operation dispatcher.

The UI layer (keyboard handler, buttons, drag-and-drop adapter) never calls
the engines directly. It names an operation, the target item id and the
operation parameters:

    session = Session(config, items)
    session.dispatch("cycle_forward", item_id)
    session.dispatch("move", item_id, new_parent_id=None, index=0)
    session.dispatch("add", parent_id, text="Call the plumber")

Every call runs to completion (mutation, aggregate propagation, notification)
before returning an Outcome.

The session also owns the active editor slot: at most one metadata editor
(date picker, tag list, assignee list, status picker, text input, ...) is
open at a time. Opening one closes the other; cancelling discards pending
input without committing anything.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from outline.events import EventChannel
from outline.lib.config import OutlineConfig
from outline.lib.constants import REASON_UNCHANGED
from outline.lib.types import Outcome, UnknownOperation
from outline.tree.aggregate import AggregateCalculator
from outline.tree.io import dump_items, load_items
from outline.tree.models import Item
from outline.tree.store import ItemTree
from outline.workflow.hierarchy import HierarchyMutator
from outline.workflow.metadata import MetadataEditor
from outline.workflow.permissions import PermissionGuard
from outline.workflow.status import StatusEngine

logger = logging.getLogger(__name__)

# Editor kind -> (operation applied on confirm, parameter carrying the pending value)
EDITORS: dict[str, tuple[str, Optional[str]]] = {
    "status": ("set_status", "target"),
    "due": ("set_due", "when"),
    "schedule": ("set_schedule", "when"),
    "assign": ("set_assignee", "assignee"),
    "tags": ("set_tags", "tags"),
    "comments": ("add_comment", "text"),
    "worklog": ("add_worklog", "text"),
    "archive": ("archive", None),
    "text": ("save_edit", "new_text"),
}

REASON_NO_EDITOR = "no-editor"

_PENDING = object()


@dataclass
class ActiveEditor:
    """The one open editor."""
    kind: str
    item_id: str
    pending: Any = None


class Session:
    """Single-client outline state: tree, engines, guard, events, editor slot."""

    def __init__(
        self,
        config: Optional[OutlineConfig] = None,
        items: Optional[list[dict]] = None,
        channel: Optional[EventChannel] = None,
    ):
        self.config = config or OutlineConfig()
        if items:
            self.tree, self.calculator = load_items(items, self.config)
        else:
            self.tree = ItemTree(self.config.status_labels)
            self.calculator = AggregateCalculator(self.tree)
        self.channel = channel or EventChannel()

        self.status = StatusEngine(self.tree, self.calculator, self.channel)
        self.hierarchy = HierarchyMutator(self.tree, self.calculator, self.channel)
        self.metadata = MetadataEditor(self.tree, self.channel, self.config.current_user)
        self.guard = PermissionGuard(self.tree, self.channel)
        self.editor: Optional[ActiveEditor] = None

        violations = self.tree.completion_violations()
        if violations:
            logger.warning(f"[TREE] completed items with incomplete children on load: {violations}")

        self._operations: dict[str, Callable[..., Outcome]] = {
            # status
            "cycle_forward": self.status.cycle_forward,
            "cycle_backward": self.status.cycle_backward,
            "toggle": self.status.toggle,
            "set_status": self.status.set_status,
            # hierarchy
            "add": self._add,
            "add_after": self.hierarchy.add_after,
            "indent": self.hierarchy.indent,
            "outdent": self.hierarchy.outdent,
            "move": self.hierarchy.move,
            "move_up": self.hierarchy.move_up,
            "move_down": self.hierarchy.move_down,
            "archive": self.hierarchy.archive,
            "collapse": self.hierarchy.collapse,
            "expand": self.hierarchy.expand,
            "cycle_collapsed": self.hierarchy.cycle_collapsed,
            # metadata
            "set_due": self.metadata.set_due,
            "set_schedule": self.metadata.set_schedule,
            "schedule_now": self.metadata.schedule_now,
            "set_assignee": self.metadata.set_assignee,
            "set_tags": self.metadata.set_tags,
            "toggle_tag": self.metadata.toggle_tag,
            "add_tag": self.metadata.add_tag,
            "toggle_priority": self.metadata.toggle_priority,
            "toggle_blocked": self.metadata.toggle_blocked,
            "add_comment": self.metadata.add_comment,
            "add_worklog": self.metadata.add_worklog,
            # text
            "begin_edit": self.metadata.begin_edit,
            "save_edit": self.metadata.save_edit,
            "cancel_edit": self.metadata.cancel_edit,
        }

    def _add(self, parent_id: Optional[str], text: str, index: Optional[int] = None) -> Outcome:
        return self.hierarchy.add(text, parent_id, index)

    # -------------------- dispatch --------------------

    def operations(self) -> list[str]:
        return list(self._operations)

    def dispatch(self, op: str, item_id: Optional[str] = None, **params) -> Outcome:
        """Run operation `op` on item_id through the permission guard.

        For "add", item_id is the parent (None for a root item).

        Raises:
            UnknownOperation: If op is not a known operation
            ItemNotFound: If item_id is not in the tree
        """
        operation = self._operations.get(op)
        if operation is None:
            raise UnknownOperation(op)
        if item_id is not None:
            self.tree.get(item_id)
        return self.guard.run(op, item_id, operation, **params)

    # -------------------- active editor --------------------

    def open_editor(self, kind: str, item_id: str, pending: Any = None) -> Outcome:
        """Open the `kind` editor on item_id, closing any other open editor."""
        if kind not in EDITORS:
            raise UnknownOperation(f"editor:{kind}")
        self.tree.get(item_id)
        if self.editor is not None:
            self.cancel_editor()

        op = EDITORS[kind][0]
        if not self.guard.allows(op, item_id):
            self.channel.permission_denied(item_id, op)
            return Outcome.denied(f"editor:{kind}", item_id, op)

        if kind == "text":
            self.dispatch("begin_edit", item_id)
            if pending is None:
                pending = self.tree.get(item_id).text

        self.editor = ActiveEditor(kind=kind, item_id=item_id, pending=pending)
        logger.debug(f"[EDITOR] opened {kind} on {item_id}")
        return Outcome.ok(f"editor:{kind}", item_id)

    def update_editor(self, pending: Any) -> None:
        """Replace the pending value of the open editor."""
        if self.editor is not None:
            self.editor.pending = pending

    def confirm_editor(self, value: Any = _PENDING) -> Outcome:
        """Apply the open editor's value and close it."""
        if self.editor is None:
            return Outcome.noop("editor:confirm", None, REASON_NO_EDITOR)

        editor, self.editor = self.editor, None
        if value is not _PENDING:
            editor.pending = value
        op, param = EDITORS[editor.kind]
        params = {param: editor.pending} if param else {}
        logger.debug(f"[EDITOR] confirmed {editor.kind} on {editor.item_id}")
        return self.dispatch(op, editor.item_id, **params)

    def cancel_editor(self) -> Outcome:
        """Close the open editor without applying anything."""
        if self.editor is None:
            return Outcome.noop("editor:cancel", None, REASON_NO_EDITOR)

        editor, self.editor = self.editor, None
        if editor.kind == "text":
            self.metadata.cancel_edit(editor.item_id)
        logger.debug(f"[EDITOR] cancelled {editor.kind} on {editor.item_id}")
        return Outcome.noop("editor:cancel", editor.item_id, REASON_UNCHANGED)

    # -------------------- read-only views --------------------

    def get(self, item_id: str) -> Item:
        return self.tree.get(item_id)

    def walk(self, visible_only: bool = False) -> Iterator[tuple[int, Item]]:
        """(depth, item) in document order, for renderers."""
        return self.tree.walk(visible_only)

    def snapshot(self) -> list[dict]:
        """Document form of the current tree."""
        return dump_items(self.tree)

    def check(self) -> dict[str, list[str]]:
        """Consistency report: stale aggregates and completion violations."""
        return {
            "stale_progress": self.calculator.verify(),
            "completion_violations": self.tree.completion_violations(),
        }
