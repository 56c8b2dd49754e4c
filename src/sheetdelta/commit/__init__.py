"""Stage / notify / commit protocol.

Exports
-------
CommitCoordinator
    Runs one lock-guarded inspection and commits only after notification.
RunStateMachine
    Enforces the order of run phases.
"""

from .coordinator import CommitCoordinator
from .phases import RunStateMachine

__all__ = [
    "CommitCoordinator",
    "RunStateMachine",
]
