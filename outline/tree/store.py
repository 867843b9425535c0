"""
Item tree: arena storage for the outline.

Items are stored by id, with ownership kept in two side tables:

    parent:   id -> parent id (None for root items)
    children: id -> ordered list of child ids

An item with no entry in the children table has no sublist at all. That is
the "has children" marker the renderer reads; an empty list never stays in
the table because detach() drops it as soon as the last child leaves.

The tree knows the configured status labels so completion (an end-state
label) can be answered here without reaching into the state machine.
"""

import logging
from typing import Iterator, Optional, Sequence

from outline.lib.config import StatusLabel
from outline.lib.types import ItemNotFound
from outline.tree.models import Item

logger = logging.getLogger(__name__)


class ItemTree:
    """Rooted, ordered forest of items keyed by opaque id."""

    def __init__(self, status_labels: Sequence[StatusLabel]):
        self.status_labels: list[StatusLabel] = list(status_labels)
        self._items: dict[str, Item] = {}
        self._parent: dict[str, Optional[str]] = {}
        self._children: dict[str, list[str]] = {}
        self._roots: list[str] = []

    # -------------------- queries --------------------

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFound(item_id) from None

    @property
    def roots(self) -> list[str]:
        return list(self._roots)

    def parent_of(self, item_id: str) -> Optional[str]:
        self.get(item_id)
        return self._parent[item_id]

    def children_of(self, item_id: Optional[str]) -> list[str]:
        """Ordered child ids of item_id (root items when item_id is None)."""
        if item_id is None:
            return list(self._roots)
        self.get(item_id)
        return list(self._children.get(item_id, []))

    def has_children(self, item_id: str) -> bool:
        self.get(item_id)
        return item_id in self._children

    def siblings_of(self, item_id: str) -> list[str]:
        """The list item_id lives in, including item_id itself."""
        return self.children_of(self.parent_of(item_id))

    def index_of(self, item_id: str) -> int:
        return self._list_for(self.parent_of(item_id)).index(item_id)

    def ancestors(self, item_id: str) -> Iterator[str]:
        """Parent, grandparent, ... up to the root item."""
        current = self.parent_of(item_id)
        while current is not None:
            yield current
            current = self._parent[current]

    def depth(self, item_id: str) -> int:
        return sum(1 for _ in self.ancestors(item_id))

    def descendants(self, item_id: str) -> list[str]:
        """All ids below item_id, in document order."""
        result = []
        stack = list(reversed(self._children.get(item_id, [])))
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return result

    def is_descendant(self, candidate: str, of: str) -> bool:
        """True if candidate lies strictly below `of`."""
        return of in self.ancestors(candidate)

    def is_collapsed(self, item_id: str) -> bool:
        """True if item_id hides its children."""
        return self.get(item_id).collapsed and item_id in self._children

    def _visible_children(self, item_id: str) -> list[str]:
        if self.is_collapsed(item_id):
            return []
        return self._children.get(item_id, [])

    def walk(self, visible_only: bool = False) -> Iterator[tuple[int, Item]]:
        """Yield (depth, item) in document order.

        With visible_only, children of collapsed items are skipped.
        """
        stack = [(0, item_id) for item_id in reversed(self._roots)]
        while stack:
            depth, current = stack.pop()
            yield depth, self._items[current]
            if visible_only:
                children = self._visible_children(current)
            else:
                children = self._children.get(current, [])
            for child in reversed(children):
                stack.append((depth + 1, child))

    # -------------------- status helpers --------------------

    def label_for(self, item: Item) -> Optional[StatusLabel]:
        """Configured label for the item's status, or None (no label / unknown index)."""
        index = item.status.index
        if index is None or not 0 <= index < len(self.status_labels):
            return None
        return self.status_labels[index]

    def is_completed(self, item_id: str) -> bool:
        label = self.label_for(self.get(item_id))
        return label is not None and label.is_end_state

    def is_completable(self, item_id: str) -> bool:
        """Headers (no label) never count toward a parent's progress."""
        return self.get(item_id).has_label

    def incomplete_children(self, item_id: str) -> list[str]:
        """Completable direct children that are not completed."""
        return [
            c for c in self._children.get(item_id, [])
            if self.is_completable(c) and not self.is_completed(c)
        ]

    def completion_violations(self) -> list[str]:
        """Completed items that still have incomplete completable children.

        Always empty for trees only touched through the engine; externally
        supplied trees may arrive this way.
        """
        return [
            item.id for _, item in self.walk()
            if self.is_completed(item.id) and self.incomplete_children(item.id)
        ]

    # -------------------- structure edits --------------------

    def _list_for(self, parent_id: Optional[str]) -> list[str]:
        if parent_id is None:
            return self._roots
        return self._children.get(parent_id, [])

    def insert(self, item: Item, parent_id: Optional[str] = None, index: Optional[int] = None) -> None:
        """Add a new item under parent_id (root when None) at index (append when None)."""
        if item.id in self._items:
            raise ValueError(f"Duplicate item id: {item.id}")
        if parent_id is not None:
            self.get(parent_id)
        self._items[item.id] = item
        self._parent[item.id] = None
        self.attach(item.id, parent_id, index)

    def attach(self, item_id: str, parent_id: Optional[str], index: Optional[int] = None) -> int:
        """Place a detached item into parent_id's list. Returns the final index."""
        if parent_id is None:
            target = self._roots
        else:
            self.get(parent_id)
            target = self._children.setdefault(parent_id, [])
        if index is None or index > len(target):
            index = len(target)
        index = max(index, 0)
        target.insert(index, item_id)
        self._parent[item_id] = parent_id
        return index

    def detach(self, item_id: str) -> tuple[Optional[str], int]:
        """Take item_id (with its subtree) out of its list.

        Returns (former parent id, former index). Clears the former parent's
        has-children marker when its list becomes empty.
        """
        parent_id = self.parent_of(item_id)
        siblings = self._list_for(parent_id)
        index = siblings.index(item_id)
        siblings.pop(index)
        if parent_id is not None and not siblings:
            del self._children[parent_id]
            self._items[parent_id].collapsed = False
        self._parent[item_id] = None
        return parent_id, index

    def remove_subtree(self, item_id: str) -> list[str]:
        """Permanently delete item_id and everything below it. Returns removed ids."""
        removed = [item_id] + self.descendants(item_id)
        self.detach(item_id)
        for current in removed:
            del self._items[current]
            del self._parent[current]
            self._children.pop(current, None)
        logger.debug(f"[TREE] removed {len(removed)} item(s) under {item_id}")
        return removed

    # -------------------- navigation --------------------

    def next_focus_after_removal(self, item_id: str) -> Optional[str]:
        """Item to focus once item_id goes away.

        Next sibling, else previous sibling, else parent, else any other item.
        """
        siblings = self.siblings_of(item_id)
        index = siblings.index(item_id)
        if index < len(siblings) - 1:
            return siblings[index + 1]
        if index > 0:
            return siblings[index - 1]
        parent_id = self.parent_of(item_id)
        if parent_id is not None:
            return parent_id
        for _, item in self.walk():
            if item.id != item_id and not self.is_descendant(item.id, item_id):
                return item.id
        return None

    def next_item(self, item_id: str) -> Optional[str]:
        """Next visible item in document order (for keyboard navigation)."""
        children = self._visible_children(item_id)
        if children:
            return children[0]
        current = item_id
        while current is not None:
            siblings = self._list_for(self._parent[current])
            index = siblings.index(current)
            if index < len(siblings) - 1:
                return siblings[index + 1]
            current = self._parent[current]
        return None

    def previous_item(self, item_id: str) -> Optional[str]:
        """Previous visible item in document order."""
        siblings = self.siblings_of(item_id)
        index = siblings.index(item_id)
        if index == 0:
            return self._parent[item_id]
        current = siblings[index - 1]
        while self._visible_children(current):
            current = self._children[current][-1]
        return current
