"""Run phase state machine.

Tracks a run through the stage / notify / commit protocol and rejects
out-of-order transitions, so a commit can never follow a failed or
skipped-but-required notification.
"""

from __future__ import annotations

from sheetdelta.errors import InvalidTransitionError
from sheetdelta.models import RunPhase


class RunStateMachine:
    """Finite state machine for a single run.

    Valid transitions::

        INIT          -> STAGED | ABORTED
        STAGED        -> NOTIFIED | COMMITTED | NOTIFY_FAILED | ABORTED
        NOTIFIED      -> COMMITTED | ABORTED
        NOTIFY_FAILED -> ABORTED
        COMMITTED     -> (terminal)
        ABORTED       -> (terminal)

    ``STAGED -> COMMITTED`` is the path taken when there is nothing to
    notify, or on the first run.
    """

    VALID_TRANSITIONS: dict[RunPhase, set[RunPhase]] = {
        RunPhase.INIT: {RunPhase.STAGED, RunPhase.ABORTED},
        RunPhase.STAGED: {
            RunPhase.NOTIFIED,
            RunPhase.COMMITTED,
            RunPhase.NOTIFY_FAILED,
            RunPhase.ABORTED,
        },
        RunPhase.NOTIFIED: {RunPhase.COMMITTED, RunPhase.ABORTED},
        RunPhase.NOTIFY_FAILED: {RunPhase.ABORTED},
        RunPhase.COMMITTED: set(),
        RunPhase.ABORTED: set(),
    }

    def __init__(self) -> None:
        self.phase: RunPhase = RunPhase.INIT
        self.history: list[RunPhase] = [RunPhase.INIT]

    @property
    def is_terminal(self) -> bool:
        return not self.VALID_TRANSITIONS[self.phase]

    def transition(self, new_phase: RunPhase) -> None:
        """Move to *new_phase*.

        Raises
        ------
        InvalidTransitionError
            If the move is not allowed from the current phase.
        """
        allowed = self.VALID_TRANSITIONS.get(self.phase, set())
        if new_phase not in allowed:
            raise InvalidTransitionError(
                message=(
                    f"Invalid run transition: {self.phase.value} -> {new_phase.value}. "
                    f"Allowed from {self.phase.value}: "
                    f"{{{', '.join(sorted(p.value for p in allowed))}}}"
                ),
                context={
                    "current_phase": self.phase.value,
                    "requested_phase": new_phase.value,
                },
            )
        self.phase = new_phase
        self.history.append(new_phase)

    def abort(self) -> None:
        """Move to ``ABORTED`` unless the run already reached a terminal phase."""
        if not self.is_terminal:
            self.transition(RunPhase.ABORTED)
