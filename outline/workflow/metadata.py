"""Item metadata edits: dates, assignee, tags, flags, comments, worklog, text.

Metadata never changes completion, so none of these touch aggregates.
Comment and worklog lists are append-only.
"""

import logging
from datetime import date, datetime
from typing import Iterable, Optional

from outline.events import EventChannel
from outline.lib.config import split_names
from outline.lib.constants import (
    EVENT_ASSIGN,
    EVENT_BLOCKED,
    EVENT_COMMENT,
    EVENT_DUE,
    EVENT_EDIT_CANCEL,
    EVENT_EDIT_SAVE,
    EVENT_EDIT_START,
    EVENT_PRIORITY,
    EVENT_SCHEDULE,
    EVENT_TAGS,
    EVENT_WORKLOG,
    REASON_EMPTY_TEXT,
    REASON_UNCHANGED,
)
from outline.lib.types import Outcome
from outline.tree.models import Entry, format_timestamp, parse_timestamp
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)

When = date | datetime | str | None


def _clean_tag(tag: str) -> str:
    return tag.strip().lstrip("#")


def _unique(tags: Iterable[str] | str) -> list[str]:
    """Drop blanks and duplicates, keep first-seen order. Accepts "a, b"."""
    result = []
    for tag in split_names(tags):
        tag = _clean_tag(tag)
        if tag and tag not in result:
            result.append(tag)
    return result


class MetadataEditor:
    """Collaborative metadata on items of one tree."""

    def __init__(self, tree: ItemTree, channel: EventChannel, current_user: str):
        self.tree = tree
        self.channel = channel
        self.current_user = current_user

    # -------------------- dates --------------------

    def set_due(self, item_id: str, when: When) -> Outcome:
        """Set (or clear, with None) the due date."""
        item = self.tree.get(item_id)
        item.due = parse_timestamp(when)
        self.channel.emit(EVENT_DUE, id=item_id, timestamp=format_timestamp(item.due))
        return Outcome.ok("set_due", item_id, due=item.due)

    def set_schedule(self, item_id: str, when: When) -> Outcome:
        """Set (or clear, with None) the scheduled date."""
        item = self.tree.get(item_id)
        item.schedule = parse_timestamp(when)
        self.channel.emit(EVENT_SCHEDULE, id=item_id, timestamp=format_timestamp(item.schedule))
        return Outcome.ok("set_schedule", item_id, schedule=item.schedule)

    def schedule_now(self, item_id: str) -> Outcome:
        return self.set_schedule(item_id, datetime.now().replace(second=0, microsecond=0))

    # -------------------- assignee / tags --------------------

    def set_assignee(self, item_id: str, assignee: Optional[str]) -> Outcome:
        item = self.tree.get(item_id)
        item.assignee = assignee.strip() if assignee and assignee.strip() else None
        self.channel.emit(EVENT_ASSIGN, id=item_id, assignee=item.assignee)
        return Outcome.ok("set_assignee", item_id, assignee=item.assignee)

    def set_tags(self, item_id: str, tags: Iterable[str] | str) -> Outcome:
        item = self.tree.get(item_id)
        item.tags = _unique(tags)
        self.channel.emit(EVENT_TAGS, id=item_id, tags=list(item.tags))
        return Outcome.ok("set_tags", item_id, tags=list(item.tags))

    def toggle_tag(self, item_id: str, tag: str, on: bool) -> Outcome:
        """Check or uncheck one tag."""
        tag = _clean_tag(tag)
        tags = list(self.tree.get(item_id).tags)
        if not tag:
            return Outcome.noop("toggle_tag", item_id, REASON_EMPTY_TEXT)
        if on and tag not in tags:
            tags.append(tag)
        elif not on and tag in tags:
            tags.remove(tag)
        return self.set_tags(item_id, tags)

    def add_tag(self, item_id: str, tag: str) -> Outcome:
        tags = self.tree.get(item_id).tags
        if _clean_tag(tag) in tags:
            return Outcome.noop("add_tag", item_id, REASON_UNCHANGED)
        return self.set_tags(item_id, tags + [tag])

    # -------------------- flags --------------------

    def toggle_priority(self, item_id: str) -> Outcome:
        item = self.tree.get(item_id)
        item.priority = not item.priority
        self.channel.emit(EVENT_PRIORITY, id=item_id, priority=item.priority)
        return Outcome.ok("toggle_priority", item_id, priority=item.priority)

    def toggle_blocked(self, item_id: str) -> Outcome:
        item = self.tree.get(item_id)
        item.blocked = not item.blocked
        self.channel.emit(EVENT_BLOCKED, id=item_id, blocked=item.blocked)
        return Outcome.ok("toggle_blocked", item_id, blocked=item.blocked)

    # -------------------- comments / worklog --------------------

    def add_comment(self, item_id: str, text: str) -> Outcome:
        item = self.tree.get(item_id)
        text = (text or "").strip()
        if not text:
            return Outcome.noop("add_comment", item_id, REASON_EMPTY_TEXT)
        entry = Entry(text=text, author=self.current_user)
        item.comments.append(entry)
        self.channel.emit(EVENT_COMMENT, id=item_id, comment=entry.to_dict())
        return Outcome.ok("add_comment", item_id, entry=entry)

    def add_worklog(self, item_id: str, text: str) -> Outcome:
        item = self.tree.get(item_id)
        text = (text or "").strip()
        if not text:
            return Outcome.noop("add_worklog", item_id, REASON_EMPTY_TEXT)
        entry = Entry(text=text, author=self.current_user)
        item.worklog.append(entry)
        self.channel.emit(EVENT_WORKLOG, id=item_id, worklogEntry=entry.to_dict())
        return Outcome.ok("add_worklog", item_id, entry=entry)

    # -------------------- text --------------------

    def begin_edit(self, item_id: str) -> Outcome:
        item = self.tree.get(item_id)
        self.channel.emit(EVENT_EDIT_START, id=item_id, originalText=item.text)
        return Outcome.ok("begin_edit", item_id, text=item.text)

    def save_edit(self, item_id: str, new_text: str) -> Outcome:
        """Commit edited text. Blank input keeps the original text."""
        item = self.tree.get(item_id)
        original = item.text
        new_text = (new_text or "").strip() or original
        if new_text == original:
            self.channel.emit(EVENT_EDIT_CANCEL, id=item_id)
            return Outcome.noop("save_edit", item_id, REASON_UNCHANGED)

        item.text = new_text
        logger.info(f"[TREE] {item_id}: text changed")
        self.channel.emit(EVENT_EDIT_SAVE, id=item_id, originalText=original, newText=new_text)
        return Outcome.ok("save_edit", item_id, text=new_text, original=original)

    def cancel_edit(self, item_id: str) -> Outcome:
        self.tree.get(item_id)
        self.channel.emit(EVENT_EDIT_CANCEL, id=item_id)
        return Outcome.noop("cancel_edit", item_id, REASON_UNCHANGED)
