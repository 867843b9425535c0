"""
Data models for the item tree.

Items hold their own content and metadata only. Parent/child ownership lives
in the ItemTree arena (see store.py), so nothing here points at another item.
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import NamedTuple, Optional

from outline.lib.constants import NO_LABEL_TOKEN, STATUS_TOKEN_PREFIX


@dataclass(frozen=True)
class StatusState:
    """Workflow status of an item.

    index is None for the no-label (header) state, otherwise an index into
    the configured status label list.
    """
    index: Optional[int] = None

    @property
    def has_label(self) -> bool:
        return self.index is not None

    @property
    def token(self) -> str:
        """State name used by the FSM and in events: "none" or "status-<i>"."""
        if self.index is None:
            return NO_LABEL_TOKEN
        return f"{STATUS_TOKEN_PREFIX}{self.index}"

    @classmethod
    def at(cls, index: int) -> "StatusState":
        return cls(index=index)

    def __str__(self) -> str:
        return self.token


NO_LABEL = StatusState()


def parse_state(token: str | None) -> StatusState | None:
    """Parse a status token into a StatusState.

    Returns None if the token is not a status token.
    """
    if token is None:
        return None
    if token == NO_LABEL_TOKEN:
        return NO_LABEL
    if token.startswith(STATUS_TOKEN_PREFIX):
        suffix = token[len(STATUS_TOKEN_PREFIX):]
        if suffix.isdigit():
            return StatusState.at(int(suffix))
    return None


def new_id() -> str:
    """Generate an opaque item/entry id."""
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now().isoformat()


@dataclass
class Entry:
    """A comment or worklog entry. Append-only once attached to an item."""
    text: str
    author: str
    id: str = field(default_factory=new_id)
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> dict:
        return asdict(self)


class Progress(NamedTuple):
    """Completion aggregate over an item's completable direct children."""
    done: int
    total: int


@dataclass
class Item:
    """A single node in the outline."""
    text: str
    id: str = field(default_factory=new_id)
    status: StatusState = NO_LABEL
    editable: bool = True
    priority: bool = False
    blocked: bool = False
    due: date | datetime | None = None
    schedule: date | datetime | None = None
    assignee: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    comments: list[Entry] = field(default_factory=list)
    worklog: list[Entry] = field(default_factory=list)
    collapsed: bool = False  # Children hidden from navigation and rendering
    child_progress: Optional[Progress] = None  # Cached by AggregateCalculator

    @property
    def has_label(self) -> bool:
        return self.status.has_label

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Item(id={self.id!r}, text={self.text!r}, status={self.status.token})"


def parse_timestamp(value: date | datetime | str | None) -> date | datetime | None:
    """Accept a date, a datetime or an ISO string ("2026-03-01", "2026-03-01T09:30").

    Raises:
        ValueError: If a string is not ISO formatted
    """
    if value is None or isinstance(value, (date, datetime)):
        return value
    text = value.strip()
    if not text:
        return None
    if "T" in text or " " in text:
        return datetime.fromisoformat(text)
    return date.fromisoformat(text)


def format_timestamp(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
