"""Lifecycle state machine for run execution.

Defines the states a run goes through while the external trainer owns it
and the allowed transitions between them.  The state machine keeps the
runner from, e.g., reporting completion of a run that never started.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List


class LifecycleState(Enum):
    """Possible states of a run."""

    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    TERMINATED = "terminated"
    ERRORED = "errored"


# Allowed transitions encoded as adjacency list
_TRANSITIONS: Dict[LifecycleState, List[LifecycleState]] = {
    LifecycleState.PENDING: [LifecycleState.RUNNING, LifecycleState.ERRORED],
    LifecycleState.RUNNING: [
        LifecycleState.PAUSED,
        LifecycleState.TERMINATED,
        LifecycleState.ERRORED,
    ],
    LifecycleState.PAUSED: [LifecycleState.RUNNING, LifecycleState.ERRORED],
    LifecycleState.TERMINATED: [],
    LifecycleState.ERRORED: [],
}


class StateMachine:
    """Manages valid lifecycle state transitions.

    Raises :class:`ValueError` on illegal transition attempts.

    Example::

        sm = StateMachine()
        sm.transition(LifecycleState.RUNNING)
        sm.transition(LifecycleState.TERMINATED)
        assert sm.is_finished
    """

    def __init__(self) -> None:
        self._state = LifecycleState.PENDING

    @property
    def state(self) -> LifecycleState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_finished(self) -> bool:
        """``True`` once the run reached a terminal state."""
        return not _TRANSITIONS[self._state]

    def can_transition(self, target: LifecycleState) -> bool:
        """Check whether transitioning to *target* is allowed.

        Args:
            target: Desired next state.

        Returns:
            ``True`` if the transition is valid.
        """
        return target in _TRANSITIONS.get(self._state, [])

    def transition(self, target: LifecycleState) -> None:
        """Transition to *target* state.

        Args:
            target: Desired next state.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if not self.can_transition(target):
            raise ValueError(
                f"Invalid transition: {self._state.value} -> {target.value}"
            )
        self._state = target

    def reset(self) -> None:
        """Reset the state machine back to ``PENDING``."""
        self._state = LifecycleState.PENDING
