"""Status changes for outline items.

Thin layer over the FSM in fsm.py. All transition logic lives there; this
module provides:
- cycle_forward / cycle_backward / toggle / set_status entry points
- aggregate propagation after a status change
- item:status and permission-denied notifications

Usage:
    engine = StatusEngine(tree, calculator, channel)
    engine.cycle_forward(item_id)
    engine.set_status(item_id, "status-2")
"""

import logging
from typing import Optional, Union

from outline.events import EventChannel
from outline.lib.constants import EVENT_STATUS, REASON_NO_LABELS
from outline.lib.types import Outcome
from outline.tree.aggregate import AggregateCalculator
from outline.tree.models import StatusState, parse_state
from outline.tree.store import ItemTree
from outline.workflow.fsm import ItemStatusFSM, StatusTable, select_trigger

logger = logging.getLogger(__name__)


class StatusEngine:
    """Status state machine entry points for every item of one tree."""

    def __init__(
        self,
        tree: ItemTree,
        calculator: AggregateCalculator,
        channel: EventChannel,
        table: Optional[StatusTable] = None,
    ):
        self.tree = tree
        self.calculator = calculator
        self.channel = channel
        self.table = table or StatusTable(tree.status_labels)

    def fsm_for(self, item_id: str) -> ItemStatusFSM:
        return ItemStatusFSM(self.tree, self.table, item_id)

    def cycle_forward(self, item_id: str) -> Outcome:
        return self._run("cycle_forward", item_id, "cycle_forward")

    def cycle_backward(self, item_id: str) -> Outcome:
        return self._run("cycle_backward", item_id, "cycle_backward")

    def toggle(self, item_id: str) -> Outcome:
        """Legacy click-to-cycle. Prefer cycle_forward for new callers."""
        return self._run("toggle", item_id, "toggle")

    def set_status(self, item_id: str, target: Union[StatusState, str, None]) -> Outcome:
        """Jump to target: a StatusState, a token ("none", "status-<i>") or None for no label."""
        state = self._resolve_target(target)
        return self._run("set_status", item_id, select_trigger(state))

    def next_status(self, item_id: str, trigger: str = "cycle_forward") -> Optional[StatusState]:
        """Where trigger would take the item, without changing anything."""
        if not self.table.labels:
            return None
        dest = self.fsm_for(item_id).target(trigger)
        return parse_state(dest) if dest else None

    def _resolve_target(self, target: Union[StatusState, str, None]) -> StatusState:
        if target is None or not self.table.labels:
            return StatusState()
        state = target if isinstance(target, StatusState) else parse_state(target)
        if state is None or (state.index is not None and state.index >= len(self.table.labels)):
            # Unknown status: fall back to the first configured one
            logger.warning(f"[STATUS] Unknown status '{target}', using first configured status")
            return StatusState.at(0)
        return state

    def _run(self, op: str, item_id: str, trigger: str) -> Outcome:
        self.tree.get(item_id)
        if not self.table.labels:
            logger.debug(f"[STATUS] {item_id}: {op} ignored, no status labels configured")
            return Outcome.noop(op, item_id, REASON_NO_LABELS)

        fsm = self.fsm_for(item_id)
        from_state = self.tree.get(item_id).status.token
        if not fsm.fire(trigger):
            self.channel.permission_denied(item_id, fsm.rejection)
            return Outcome.denied(op, item_id, fsm.rejection)

        item = self.tree.get(item_id)
        self.calculator.propagate(self.tree.parent_of(item_id))

        completed = self.tree.is_completed(item_id)
        self.channel.emit(
            EVENT_STATUS,
            id=item_id,
            to=item.status.token,
            completed=completed,
            hasLabel=item.has_label,
        )
        return Outcome.ok(op, item_id, **{"from": from_state, "to": item.status.token, "completed": completed})
