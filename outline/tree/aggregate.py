"""
Child completion aggregates.

Each item caches (done, total) over its completable direct children. Headers
(no-label children) are excluded from both counts. When there is nothing to
count the cache is cleared to None, never stored as (0, 0).

Every mutation must call propagate() on each structurally affected node so
no ancestor keeps a stale count.
"""

import logging
from typing import Iterable, Optional

from outline.tree.models import Progress
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)


class AggregateCalculator:
    """Computes and caches child_progress on items of one ItemTree."""

    def __init__(self, tree: ItemTree):
        self.tree = tree

    def compute(self, item_id: str) -> Optional[Progress]:
        """Fresh (done, total) for item_id without touching the cache."""
        completable = [c for c in self.tree.children_of(item_id) if self.tree.is_completable(c)]
        if not completable:
            return None
        done = sum(1 for c in completable if self.tree.is_completed(c))
        return Progress(done, len(completable))

    def recompute(self, item_id: str) -> Optional[Progress]:
        """Recompute and store item_id's progress."""
        progress = self.compute(item_id)
        self.tree.get(item_id).child_progress = progress
        return progress

    def propagate(self, item_id: Optional[str]) -> None:
        """Recompute item_id and every ancestor up to the root.

        None (the virtual root) is accepted and ignored so callers can pass a
        former parent without checking for root level.
        """
        if item_id is None or item_id not in self.tree:
            return
        self.recompute(item_id)
        for ancestor in self.tree.ancestors(item_id):
            self.recompute(ancestor)

    def propagate_all(self, item_ids: Iterable[Optional[str]]) -> None:
        """Propagate from several nodes (old parent, new parent, ...)."""
        seen = set()
        for item_id in item_ids:
            if item_id in seen:
                continue
            seen.add(item_id)
            self.propagate(item_id)

    def recompute_all(self) -> None:
        """Recompute every item, deepest first. Used after bulk loads."""
        ordered = list(self.tree.walk())
        for _, item in reversed(ordered):
            self.recompute(item.id)

    def verify(self) -> list[str]:
        """Full re-scan. Returns ids whose cached progress is stale."""
        stale = []
        for _, item in self.tree.walk():
            if item.child_progress != self.compute(item.id):
                stale.append(item.id)
        if stale:
            logger.warning(f"[TREE] stale progress on {len(stale)} item(s): {stale}")
        return stale
