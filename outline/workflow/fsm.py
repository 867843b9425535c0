"""Item status state machine using the transitions library.

States are generated from the configured status labels: "none" (no label /
header) plus one "status-<i>" state per label. Triggers:

- cycle_forward / cycle_backward: the authoritative cycle order
- toggle: legacy single-click cycling (compatibility shim)
- select_<state>: jump straight to a state (status picker)

Guards are transition conditions:
- can_complete: entering an end state requires every completable direct child
  to be completed
- parent_allows_incomplete: an incomplete labeled item may not sit directly
  under a completed parent

Usage:
    from outline.workflow.fsm import StatusTable, ItemStatusFSM

    table = StatusTable(config.status_labels)
    fsm = ItemStatusFSM(tree, table, item_id)
    fsm.fire("cycle_forward")
"""

import logging
from typing import Callable, Optional, Sequence

from transitions import Machine

from outline.lib.config import StatusLabel
from outline.lib.constants import (
    NO_LABEL_TOKEN,
    REASON_COMPLETED_PARENT,
    REASON_INCOMPLETE_CHILDREN,
)
from outline.tree.models import NO_LABEL, StatusState, parse_state
from outline.tree.store import ItemTree

logger = logging.getLogger(__name__)

CYCLE_TRIGGERS = ("cycle_forward", "cycle_backward", "toggle")


def _end_indices(labels: Sequence[StatusLabel]) -> list[int]:
    return [i for i, label in enumerate(labels) if label.is_end_state]


def _known(labels: Sequence[StatusLabel], state: StatusState) -> bool:
    return state.index is None or 0 <= state.index < len(labels)


def forward_target(labels: Sequence[StatusLabel], state: StatusState) -> Optional[StatusState]:
    """Next state in forward cycle order. None when no labels are configured."""
    if not labels:
        return None
    if not _known(labels, state):
        return StatusState.at(0)
    if state.index is None:
        return StatusState.at(0)

    i = state.index
    if labels[i].is_end_state:
        later_ends = [j for j in _end_indices(labels) if j > i]
        return StatusState.at(later_ends[0]) if later_ends else NO_LABEL
    if i < len(labels) - 1:
        return StatusState.at(i + 1)
    # Final label that is not an end state wraps to the first label
    return StatusState.at(0)


def backward_target(labels: Sequence[StatusLabel], state: StatusState) -> Optional[StatusState]:
    """Previous state in cycle order. None when no labels are configured."""
    if not labels:
        return None
    if state.index is None or not _known(labels, state):
        ends = _end_indices(labels)
        return StatusState.at(ends[-1] if ends else len(labels) - 1)
    if state.index == 0:
        return NO_LABEL
    return StatusState.at(state.index - 1)


def toggle_target(labels: Sequence[StatusLabel], state: StatusState) -> Optional[StatusState]:
    """Legacy click-to-cycle order.

    Any end state goes straight back to no label; it never walks through
    chained end states the way cycle_forward does.
    """
    if not labels:
        return None
    if not _known(labels, state) or state.index is None:
        return StatusState.at(0)
    i = state.index
    if labels[i].is_end_state or i == len(labels) - 1:
        return NO_LABEL
    return StatusState.at(i + 1)


TARGETS: dict[str, Callable[[Sequence[StatusLabel], StatusState], Optional[StatusState]]] = {
    "cycle_forward": forward_target,
    "cycle_backward": backward_target,
    "toggle": toggle_target,
}


def select_trigger(state: StatusState) -> str:
    """Trigger name that jumps to `state` from anywhere."""
    return f"select_{state.token}"


class StatusTable:
    """States and transitions generated once per status label list."""

    def __init__(self, labels: Sequence[StatusLabel]):
        self.labels: list[StatusLabel] = list(labels)
        self.states: list[str] = [NO_LABEL_TOKEN] + [
            StatusState.at(i).token for i in range(len(self.labels))
        ]
        self.transitions: list[dict] = self._build_transitions()
        # (trigger, source) -> dest, first definition wins
        self.target_for: dict[tuple[str, str], str] = {}
        for t in self.transitions:
            self.target_for.setdefault((t["trigger"], t["source"]), t["dest"])

    def is_end(self, token: str) -> bool:
        state = parse_state(token)
        if state is None or state.index is None or state.index >= len(self.labels):
            return False
        return self.labels[state.index].is_end_state

    def _conditions(self, dest: str) -> list[str]:
        if self.is_end(dest):
            return ["can_complete"]
        if dest != NO_LABEL_TOKEN:
            return ["parent_allows_incomplete"]
        return []

    def _build_transitions(self) -> list[dict]:
        transitions = []
        for source in self.states:
            state = parse_state(source)
            for trigger, target in TARGETS.items():
                dest = target(self.labels, state)
                if dest is None:
                    continue
                transitions.append({
                    "trigger": trigger,
                    "source": source,
                    "dest": dest.token,
                    "conditions": self._conditions(dest.token),
                })
        for dest in self.states:
            transitions.append({
                "trigger": select_trigger(parse_state(dest)),
                "source": "*",
                "dest": dest,
                "conditions": self._conditions(dest),
            })
        return transitions


class ItemStatusFSM:
    """State machine bound to one item of an ItemTree.

    Wraps the transitions library with outline-specific logic:
    - Loads the initial state from the item
    - Writes the new status back to the item after a transition
    - Records which guard rejected a transition
    - Logs all transitions
    """

    def __init__(self, tree: ItemTree, table: StatusTable, item_id: str):
        """Initialize FSM for an item.

        Args:
            tree: Tree holding the item
            table: States/transitions for the configured labels
            item_id: Item to drive
        """
        self.tree = tree
        self.table = table
        self.item_id = item_id
        self.rejection: Optional[str] = None
        self.recovered = False

        initial = tree.get(item_id).status.token
        if initial not in table.states:
            logger.warning(f"[STATUS] {item_id}: Unknown state '{initial}', treating as '{NO_LABEL_TOKEN}'")
            initial = NO_LABEL_TOKEN
            self.recovered = True

        self.machine = Machine(
            model=self,
            states=table.states,
            transitions=table.transitions,
            initial=initial,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def can_complete(self, event) -> bool:
        """Guard: no completable direct child may be incomplete."""
        if self.tree.incomplete_children(self.item_id):
            self.rejection = REASON_INCOMPLETE_CHILDREN
            return False
        return True

    def parent_allows_incomplete(self, event) -> bool:
        """Guard: a completed parent may not gain an incomplete child."""
        parent_id = self.tree.parent_of(self.item_id)
        if parent_id is not None and self.tree.is_completed(parent_id):
            self.rejection = REASON_COMPLETED_PARENT
            return False
        return True

    def on_state_change(self, event) -> None:
        """Callback after any state transition. Writes the status back to the item."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self.tree.get(self.item_id).status = parse_state(to_state)
        logger.info(f"[STATUS] {self.item_id}: {from_state} -> {to_state} ({trigger})")

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        """Get list of triggers available in current state."""
        return self.machine.get_triggers(self.state)

    def target(self, trigger: str) -> Optional[str]:
        """Destination `trigger` would lead to from the current state."""
        dest = self.table.target_for.get((trigger, self.state))
        if dest is None:
            dest = self.table.target_for.get((trigger, "*"))
        return dest

    def fire(self, trigger: str) -> bool:
        """Run trigger. Returns False when a guard rejected it."""
        self.rejection = None
        return self.trigger(trigger)
