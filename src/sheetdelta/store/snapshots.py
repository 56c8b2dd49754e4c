"""Durable per-tab snapshot storage.

One JSON document per tab under ``<state_dir>/snapshots``.  File names
come from :func:`~sheetdelta.utils.tab_filename`: the percent-encoded
title, or for very long titles a readable prefix plus a hash.  Each
document also records its tab title under ``"tab"``, which is what
:meth:`SnapshotStore.list_tabs` reports.
"""

from __future__ import annotations

import os
from urllib.parse import unquote

from sheetdelta.errors import StoreCorruptError
from sheetdelta.models import TabSnapshot
from sheetdelta.utils.atomic import atomic_write_json, read_json, remove_file
from sheetdelta.utils.hashing import tab_filename

_SUFFIX = ".json"


def snapshot_filename(tab: str) -> str:
    """Return the file name used for *tab*.

    >>> snapshot_filename("Q3 / Sales")
    'Q3%20%2F%20Sales.json'
    """
    return tab_filename(tab, _SUFFIX)


class SnapshotStore:
    """Read, replace and delete last-committed tab snapshots.

    Parameters
    ----------
    directory:
        Directory that holds the snapshot documents.  Created lazily on
        the first write.
    """

    def __init__(self, directory: str) -> None:
        self._dir = directory

    @property
    def directory(self) -> str:
        return self._dir

    def path_for(self, tab: str) -> str:
        return os.path.join(self._dir, snapshot_filename(tab))

    def load(self, tab: str) -> TabSnapshot | None:
        """Return the committed snapshot of *tab*, or ``None`` if there is none."""
        doc = read_json(self.path_for(tab))
        if doc is None:
            return None
        try:
            return TabSnapshot.from_document(doc)
        except (TypeError, AttributeError, ValueError) as exc:
            raise StoreCorruptError(
                message=f"Snapshot of tab {tab!r} is malformed: {exc}",
                context={"path": self.path_for(tab), "reason": str(exc)},
                cause=exc,
            ) from exc

    def save(self, tab: str, snapshot: TabSnapshot) -> None:
        """Atomically replace the snapshot of *tab*."""
        atomic_write_json(self.path_for(tab), {"tab": tab, **snapshot.to_document()})

    def delete(self, tab: str) -> bool:
        """Remove the snapshot of *tab*; ``False`` if none was stored."""
        return remove_file(self.path_for(tab))

    def list_tabs(self) -> list[str]:
        """Names of all tabs with a stored snapshot, sorted.

        Raises
        ------
        StoreCorruptError
            If a snapshot document cannot be decoded.
        """
        if not os.path.isdir(self._dir):
            return []
        tabs = []
        for entry in os.listdir(self._dir):
            if not entry.endswith(_SUFFIX):
                continue
            doc = read_json(os.path.join(self._dir, entry))
            if isinstance(doc, dict) and isinstance(doc.get("tab"), str):
                tabs.append(doc["tab"])
            else:
                tabs.append(unquote(entry[: -len(_SUFFIX)]))
        return sorted(tabs)
