"""Durable storage: tab snapshots, run state, and the run lock."""

from .lock import LockManager
from .snapshots import SnapshotStore
from .state import StateStore

__all__ = [
    "LockManager",
    "SnapshotStore",
    "StateStore",
]
