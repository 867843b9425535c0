"""
Import and export of item trees as plain JSON-shaped data.

The document is a list of item objects, each optionally holding `children`:

    [{"id": "a1", "text": "Plan trip", "status": "TODO",
      "children": [{"text": "Book hotel", "status": "DONE"}]}]

`status` is a configured label text, "none" for a header, or a "status-<i>"
token. Unknown labels fall back to the first configured status.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from outline.lib import validate
from outline.lib.config import OutlineConfig
from outline.lib.constants import NO_LABEL_TOKEN
from outline.tree.aggregate import AggregateCalculator
from outline.tree.models import (
    NO_LABEL,
    Entry,
    Item,
    StatusState,
    format_timestamp,
    new_id,
    parse_state,
    parse_timestamp,
)
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)


def _status_from(raw: dict, config: OutlineConfig) -> StatusState:
    labels = config.status_labels
    if raw.get("noLabel") or raw.get("status") == NO_LABEL_TOKEN:
        return NO_LABEL
    if not labels:
        return NO_LABEL

    status = raw.get("status")
    if status is None:
        if raw.get("completed"):
            ends = [i for i, label in enumerate(labels) if label.is_end_state]
            if ends:
                return StatusState.at(ends[0])
        return StatusState.at(0)

    index = config.label_index(status)
    if index is not None:
        return StatusState.at(index)

    state = parse_state(status)
    if state is not None and state.index is not None and state.index < len(labels):
        return state

    logger.warning(f"[TREE] {raw.get('id', '?')}: unknown status '{status}', using '{labels[0].label}'")
    return StatusState.at(0)


def _entries_from(raw_entries: list[dict]) -> list[Entry]:
    entries = []
    for raw in raw_entries:
        entry = Entry(text=raw["text"], author=raw.get("author", ""))
        if raw.get("id"):
            entry.id = raw["id"]
        if raw.get("timestamp"):
            entry.timestamp = raw["timestamp"]
        entries.append(entry)
    return entries


def item_from_dict(raw: dict, config: OutlineConfig) -> Item:
    """Build one Item (without children) from its document form."""
    return Item(
        id=raw.get("id") or new_id(),
        text=raw.get("text", ""),
        status=_status_from(raw, config),
        editable=raw.get("editable", True) is not False,
        priority=bool(raw.get("priority", False)),
        blocked=bool(raw.get("blocked", False)),
        collapsed=bool(raw.get("collapsed")) and bool(raw.get("children")),
        due=parse_timestamp(raw.get("due")),
        schedule=parse_timestamp(raw.get("schedule")),
        assignee=raw.get("assign") or None,
        tags=list(dict.fromkeys(raw.get("tags", []))),
        comments=_entries_from(raw.get("comments", [])),
        worklog=_entries_from(raw.get("worklog", [])),
    )


def load_items(data: list[dict], config: OutlineConfig) -> tuple[ItemTree, AggregateCalculator]:
    """Validate a document and build a tree with fresh aggregates.

    Raises:
        ValidationError: If the document doesn't match the items schema
        ValueError: If an id appears twice or a date is malformed
    """
    validate.validate(data, "items")

    tree = ItemTree(config.status_labels)

    def add_all(raw_items: list[dict], parent_id: Optional[str]) -> None:
        for raw in raw_items:
            item = item_from_dict(raw, config)
            tree.insert(item, parent_id)
            if "children" in raw and raw["children"]:
                add_all(raw["children"], item.id)

    add_all(data, None)
    calculator = AggregateCalculator(tree)
    calculator.recompute_all()
    logger.debug(f"[TREE] loaded {len(tree)} item(s)")
    return tree, calculator


def load_items_file(path: Path, config: OutlineConfig) -> tuple[ItemTree, AggregateCalculator]:
    """Load a JSON items file."""
    data = validate.validate_file(path, "items")
    return load_items(data, config)


def item_to_dict(tree: ItemTree, item_id: str) -> dict:
    """Document form of item_id and its subtree."""
    item = tree.get(item_id)
    label = tree.label_for(item)
    result: dict[str, Any] = {
        "id": item.id,
        "text": item.text,
        "status": label.label if label else item.status.token,
        "completed": tree.is_completed(item_id),
        "editable": item.editable,
        "priority": item.priority,
        "blocked": item.blocked,
        "collapsed": item.collapsed,
        "due": format_timestamp(item.due),
        "schedule": format_timestamp(item.schedule),
        "assign": item.assignee,
        "tags": list(item.tags),
        "comments": [e.to_dict() for e in item.comments],
        "worklog": [e.to_dict() for e in item.worklog],
    }
    if not item.has_label:
        result["noLabel"] = True
    if item.child_progress is not None:
        result["progress"] = {"done": item.child_progress.done, "total": item.child_progress.total}
    if tree.has_children(item_id):
        result["children"] = [item_to_dict(tree, c) for c in tree.children_of(item_id)]
    return result


def dump_items(tree: ItemTree) -> list[dict]:
    """Document form of the whole tree."""
    return [item_to_dict(tree, root) for root in tree.roots]


def dumps(tree: ItemTree) -> str:
    """Whole tree as an indented JSON document."""
    return json.dumps(dump_items(tree), indent=2)
