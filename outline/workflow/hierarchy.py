"""Hierarchy mutations: add, indent, outdent, move, archive, collapse.

Each operation is one atomic tree edit, followed by aggregate propagation on
every affected parent chain (old and new) and a single notification.

Boundary cases (indent of a first sibling, outdent at root level, a move to
the current position) come back as unchanged Outcomes without an event.
Moves that would break the tree or the completion invariant are rejected
with an item:permission-denied event.
"""

import logging
from typing import Optional

from outline.events import EventChannel
from outline.lib.constants import (
    DEFAULT_NEW_TEXT,
    EVENT_ADD,
    EVENT_ARCHIVE,
    EVENT_COLLAPSE,
    EVENT_EXPAND,
    EVENT_INDENT,
    EVENT_MOVE,
    EVENT_OUTDENT,
    MOVE_INDENT,
    MOVE_OUTDENT,
    MOVE_REORDER,
    REASON_AT_ROOT,
    REASON_COMPLETED_PARENT,
    REASON_FIRST_SIBLING,
    REASON_LAST_SIBLING,
    REASON_NO_CHILDREN,
    REASON_OWN_SUBTREE,
    REASON_UNCHANGED,
)
from outline.lib.types import Outcome
from outline.tree.aggregate import AggregateCalculator
from outline.tree.models import NO_LABEL, Item, StatusState
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)


class HierarchyMutator:
    """Structural edits on one ItemTree."""

    def __init__(self, tree: ItemTree, calculator: AggregateCalculator, channel: EventChannel):
        self.tree = tree
        self.calculator = calculator
        self.channel = channel

    @property
    def default_status(self) -> StatusState:
        """New items start at the first configured status."""
        return StatusState.at(0) if self.tree.status_labels else NO_LABEL

    def _blocked_by_completed_parent(self, item: Item, parent_id: Optional[str]) -> bool:
        """True if placing item under parent_id would leave a completed parent
        with an incomplete completable child."""
        if parent_id is None or not item.has_label:
            return False
        if not self.tree.is_completed(parent_id):
            return False
        label = self.tree.label_for(item)
        return label is None or not label.is_end_state

    def _deny(self, op: str, item_id: str, reason: str) -> Outcome:
        self.channel.permission_denied(item_id, reason)
        return Outcome.denied(op, item_id, reason)

    # -------------------- add --------------------

    def add(self, text: str, parent_id: Optional[str] = None, index: Optional[int] = None) -> Outcome:
        """Create an item as the last child of parent_id (or last root item)."""
        item = Item(text=text, status=self.default_status)
        if self._blocked_by_completed_parent(item, parent_id):
            return self._deny("add", parent_id, REASON_COMPLETED_PARENT)

        self.tree.insert(item, parent_id, index)
        self.calculator.propagate(parent_id)

        logger.info(f"[TREE] added {item.id} under {parent_id or 'root'}")
        self.channel.emit(EVENT_ADD, text=text, id=item.id, parentId=parent_id)
        return Outcome.ok("add", item.id, parent_id=parent_id, index=self.tree.index_of(item.id))

    def add_after(self, sibling_id: str, text: str = DEFAULT_NEW_TEXT) -> Outcome:
        """Create an item directly after sibling_id, in the same list."""
        parent_id = self.tree.parent_of(sibling_id)
        index = self.tree.index_of(sibling_id) + 1
        return self.add(text, parent_id, index)

    # -------------------- indent / outdent --------------------

    def indent(self, item_id: str) -> Outcome:
        """Make item_id the last child of its previous sibling."""
        siblings = self.tree.siblings_of(item_id)
        idx = siblings.index(item_id)
        if idx == 0:
            logger.debug(f"[TREE] {item_id}: indent ignored, first sibling")
            return Outcome.noop("indent", item_id, REASON_FIRST_SIBLING)

        prev = siblings[idx - 1]
        if self._blocked_by_completed_parent(self.tree.get(item_id), prev):
            return self._deny("indent", item_id, REASON_COMPLETED_PARENT)

        old_parent, _ = self.tree.detach(item_id)
        self.tree.attach(item_id, prev)
        self.calculator.propagate_all([prev, old_parent])

        logger.info(f"[TREE] {item_id}: indented under {prev}")
        self.channel.emit(EVENT_INDENT, id=item_id, parent=prev)
        return Outcome.ok("indent", item_id, parent=prev, old_parent=old_parent)

    def outdent(self, item_id: str) -> Outcome:
        """Promote item_id to the sibling right after its parent."""
        parent_id = self.tree.parent_of(item_id)
        if parent_id is None:
            logger.debug(f"[TREE] {item_id}: outdent ignored, already at root")
            return Outcome.noop("outdent", item_id, REASON_AT_ROOT)

        new_parent = self.tree.parent_of(parent_id)
        if self._blocked_by_completed_parent(self.tree.get(item_id), new_parent):
            return self._deny("outdent", item_id, REASON_COMPLETED_PARENT)

        self.tree.detach(item_id)
        self.tree.attach(item_id, new_parent, self.tree.index_of(parent_id) + 1)
        self.calculator.propagate_all([parent_id, new_parent])

        logger.info(f"[TREE] {item_id}: outdented from {parent_id} to {new_parent or 'root'}")
        self.channel.emit(EVENT_OUTDENT, id=item_id, newParent=new_parent)
        return Outcome.ok("outdent", item_id, parent=new_parent, old_parent=parent_id)

    # -------------------- move --------------------

    def move(self, item_id: str, new_parent_id: Optional[str], index: int) -> Outcome:
        """Relocate item_id to position `index` under new_parent_id (root when None).

        index is the position in the destination list once item_id has been
        taken out of its current list; out of range values are clamped.
        """
        old_parent = self.tree.parent_of(item_id)
        old_index = self.tree.index_of(item_id)

        if new_parent_id is not None:
            self.tree.get(new_parent_id)
            if new_parent_id == item_id or self.tree.is_descendant(new_parent_id, item_id):
                return self._deny("move", item_id, REASON_OWN_SUBTREE)

        same_parent = new_parent_id == old_parent
        destination_size = len(self.tree.children_of(new_parent_id)) - (1 if same_parent else 0)
        index = min(max(index, 0), destination_size)
        if same_parent and index == old_index:
            return Outcome.noop("move", item_id, REASON_UNCHANGED)

        if not same_parent and self._blocked_by_completed_parent(self.tree.get(item_id), new_parent_id):
            return self._deny("move", item_id, REASON_COMPLETED_PARENT)

        self.tree.detach(item_id)
        new_index = self.tree.attach(item_id, new_parent_id, index)
        self.calculator.propagate_all([old_parent, new_parent_id])

        if same_parent:
            move_type = MOVE_REORDER
        elif new_parent_id is not None:
            move_type = MOVE_INDENT
        else:
            move_type = MOVE_OUTDENT

        logger.info(f"[TREE] {item_id}: {move_type} {old_parent or 'root'}[{old_index}] -> "
                    f"{new_parent_id or 'root'}[{new_index}]")
        self.channel.emit(
            EVENT_MOVE,
            id=item_id,
            **{"from": old_index},
            to=new_index,
            moveType=move_type,
            parentId=new_parent_id,
        )
        return Outcome.ok(
            "move", item_id,
            move_type=move_type, old_parent=old_parent, parent=new_parent_id,
            old_index=old_index, index=new_index,
        )

    def move_up(self, item_id: str) -> Outcome:
        idx = self.tree.index_of(item_id)
        if idx == 0:
            return Outcome.noop("move", item_id, REASON_FIRST_SIBLING)
        return self.move(item_id, self.tree.parent_of(item_id), idx - 1)

    def move_down(self, item_id: str) -> Outcome:
        siblings = self.tree.siblings_of(item_id)
        idx = siblings.index(item_id)
        if idx == len(siblings) - 1:
            return Outcome.noop("move", item_id, REASON_LAST_SIBLING)
        return self.move(item_id, self.tree.parent_of(item_id), idx + 1)

    # -------------------- archive --------------------

    def archive(self, item_id: str) -> Outcome:
        """Remove item_id and its subtree permanently.

        The Outcome reports the former parent and index, plus a suggested
        focus target; choosing focus is left to the caller.
        """
        item = self.tree.get(item_id)
        parent_id = self.tree.parent_of(item_id)
        index = self.tree.index_of(item_id)
        next_focus = self.tree.next_focus_after_removal(item_id)

        removed = self.tree.remove_subtree(item_id)
        self.calculator.propagate(parent_id)

        logger.info(f"[TREE] {item_id}: archived with {len(removed) - 1} descendant(s)")
        self.channel.emit(EVENT_ARCHIVE, id=item_id, text=item.text)
        return Outcome.ok(
            "archive", item_id,
            parent_id=parent_id, index=index, next_focus=next_focus, removed=removed,
        )

    # -------------------- collapse / expand --------------------

    def _set_collapsed(self, op: str, item_id: str, collapsed: bool) -> Outcome:
        item = self.tree.get(item_id)
        if not self.tree.has_children(item_id):
            return Outcome.noop(op, item_id, REASON_NO_CHILDREN)
        if item.collapsed == collapsed:
            return Outcome.noop(op, item_id, REASON_UNCHANGED)

        item.collapsed = collapsed
        logger.debug(f"[TREE] {item_id}: {op}")
        self.channel.emit(EVENT_COLLAPSE if collapsed else EVENT_EXPAND, id=item_id)
        return Outcome.ok(op, item_id, collapsed=collapsed)

    def collapse(self, item_id: str) -> Outcome:
        """Hide item_id's children from navigation and rendering."""
        return self._set_collapsed("collapse", item_id, True)

    def expand(self, item_id: str) -> Outcome:
        return self._set_collapsed("expand", item_id, False)

    def cycle_collapsed(self, item_id: str) -> Outcome:
        """Flip between collapsed and expanded. Leaf items are left alone."""
        if self.tree.get(item_id).collapsed:
            return self.expand(item_id)
        return self.collapse(item_id)
