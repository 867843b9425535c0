"""Shared constants for the outline engine."""

# Status tokens used as FSM state names and in event payloads
NO_LABEL_TOKEN = "none"
STATUS_TOKEN_PREFIX = "status-"

DEFAULT_STATUS_LABELS = [
    {"label": "TODO", "is_end_state": False},
    {"label": "DONE", "is_end_state": True},
]
DEFAULT_CURRENT_USER = "current-user"
DEFAULT_NEW_TEXT = "New todo"

FEATURE_NAMES = (
    "priority",
    "blocked",
    "due",
    "schedule",
    "assign",
    "tags",
    "comments",
    "worklog",
    "archive",
    "add_button",
    "navigation",
    "reorder",
    "drag_and_drop",
)

# Event names
EVENT_ADD = "item:add"
EVENT_STATUS = "item:status"
EVENT_INDENT = "item:indent"
EVENT_OUTDENT = "item:outdent"
EVENT_MOVE = "item:move"
EVENT_ARCHIVE = "item:archive"
EVENT_DUE = "item:due"
EVENT_SCHEDULE = "item:schedule"
EVENT_ASSIGN = "item:assign"
EVENT_TAGS = "item:tags"
EVENT_PRIORITY = "item:priority"
EVENT_BLOCKED = "item:blocked"
EVENT_COMMENT = "item:comment"
EVENT_WORKLOG = "item:worklog"
EVENT_PERMISSION_DENIED = "item:permission-denied"
EVENT_EDIT_START = "item:edit:start"
EVENT_EDIT_SAVE = "item:edit:save"
EVENT_EDIT_CANCEL = "item:edit:cancel"
EVENT_COLLAPSE = "item:collapse"
EVENT_EXPAND = "item:expand"

# Guard rejection reasons (reported as the permission-denied action)
REASON_INCOMPLETE_CHILDREN = "complete-with-incomplete-children"
REASON_COMPLETED_PARENT = "incomplete-child-of-completed-parent"
REASON_OWN_SUBTREE = "move-into-own-subtree"
REASON_NOT_EDITABLE = "not-editable"

# Structural no-op reasons
REASON_NO_LABELS = "no-status-labels"
REASON_FIRST_SIBLING = "first-sibling"
REASON_LAST_SIBLING = "last-sibling"
REASON_AT_ROOT = "at-root"
REASON_UNCHANGED = "unchanged"
REASON_EMPTY_TEXT = "empty-text"
REASON_NO_CHILDREN = "no-children"

# Move classification
MOVE_REORDER = "reorder"
MOVE_INDENT = "indent"
MOVE_OUTDENT = "outdent"
