"""
Shared data types for the outline engine.

This module contains dataclasses used across multiple modules to avoid
circular imports.
"""

from dataclasses import dataclass, field


@dataclass
class Outcome:
    """Result of a single engine operation.

    Every operation returns one of these. Guard rejections and structural
    no-ops come back with applied=False and a reason; they never raise.
    """
    op: str
    item_id: str | None
    applied: bool
    reason: str | None = None  # Rejection or no-op reason
    rejected: bool = False  # True for guard rejections (an event was emitted)
    details: dict = field(default_factory=dict)  # Operation-specific extras

    @classmethod
    def ok(cls, op: str, item_id: str | None, **details) -> "Outcome":
        return cls(op=op, item_id=item_id, applied=True, details=details)

    @classmethod
    def noop(cls, op: str, item_id: str | None, reason: str) -> "Outcome":
        return cls(op=op, item_id=item_id, applied=False, reason=reason)

    @classmethod
    def denied(cls, op: str, item_id: str | None, reason: str) -> "Outcome":
        return cls(op=op, item_id=item_id, applied=False, reason=reason, rejected=True)

    def __bool__(self) -> bool:
        return self.applied


class ItemNotFound(KeyError):
    """Raised when an operation names an item id the tree does not hold."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Unknown item: {item_id}")

    def __str__(self):
        return f"Unknown item: {self.item_id}"


class UnknownOperation(ValueError):
    """Raised when the dispatcher is asked for an operation it does not know."""

    def __init__(self, op: str):
        self.op = op
        super().__init__(f"Unknown operation: {op}")
