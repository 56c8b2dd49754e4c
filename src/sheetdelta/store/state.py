"""Durable run state: per-tab fingerprints plus the last check time."""

from __future__ import annotations

from sheetdelta.errors import StoreCorruptError
from sheetdelta.models import RunState
from sheetdelta.utils.atomic import atomic_write_json, read_json


class StateStore:
    """Load and atomically replace the ``state.json`` document.

    A missing document means no run has ever committed; callers treat
    that as the first run.
    """

    def __init__(self, path: str) -> None:
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def load(self) -> RunState | None:
        doc = read_json(self._path)
        if doc is None:
            return None
        try:
            return RunState.from_document(doc)
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise StoreCorruptError(
                message=f"State document {self._path} is malformed: {exc}",
                context={"path": self._path, "reason": str(exc)},
                cause=exc,
            ) from exc

    def save(self, state: RunState) -> None:
        atomic_write_json(self._path, state.to_document())
