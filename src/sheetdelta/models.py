"""Public data models for sheetdelta.

This module contains every record type, enum and result dataclass that
crosses a component boundary: stored snapshots and run state, the lock
marker, change records, the notification payload, and run results.
All types are plain dataclasses with no behaviour beyond small derived
properties and JSON-document conversion for the persisted ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

PLACEHOLDER_PREFIX = "__EMPTY_"
"""Prefix given to the column name of an unlabeled header cell."""


def is_placeholder(column: str) -> bool:
    """Return ``True`` for blank or generated (unlabeled) column names."""
    return not column or column.startswith(PLACEHOLDER_PREFIX)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ChangeKind(str, Enum):
    """What happened to a cell, row, header row, or the record list."""

    ADDED = "Added"
    """A blank cell now holds a value."""

    UPDATED = "Updated"
    """A non-blank cell holds a different non-blank value."""

    CLEARED = "Cleared"
    """A non-blank cell is now blank."""

    ROW_ADDED = "Row Added"
    ROW_DELETED = "Row Deleted"
    HEADER_ADDED = "Header Added"
    HEADER_REMOVED = "Header Removed"
    HEADER_ORDER_CHANGED = "Header Order Changed"

    TRUNCATED = "Truncated"
    """Synthetic marker appended when a tab exceeded the change cap."""


class Severity(str, Enum):
    """Reporting priority of a change record."""

    STRUCTURAL = "STRUCTURAL"
    DATA = "DATA"
    INFO = "INFO"


class TabStatus(str, Enum):
    """Classification of a tab by the fingerprint gate."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    ADDED = "added"
    REMOVED = "removed"


class RunPhase(str, Enum):
    """Phases of the stage / notify / commit protocol."""

    INIT = "init"
    STAGED = "staged"
    NOTIFIED = "notified"
    COMMITTED = "committed"
    NOTIFY_FAILED = "notify_failed"
    ABORTED = "aborted"


class RunOutcome(str, Enum):
    """How a run ended, as reported to the scheduler."""

    COMMITTED = "committed"
    """Changes were notified and committed."""

    BASELINE = "baseline"
    """First run: baseline snapshots committed without notifying."""

    NO_CHANGES = "no_changes"
    """Nothing to report; state refreshed."""

    LOCKED = "locked"
    """Another run holds the lock; nothing was done."""

    FAILED = "failed"
    """The run aborted before commit (or during it)."""


# ---------------------------------------------------------------------------
# Persisted documents
# ---------------------------------------------------------------------------

@dataclass
class TabSnapshot:
    """Last-committed ``{headers, rows}`` of one tab.

    Attributes
    ----------
    headers:
        Header row exactly as extracted (trimmed text, may repeat or be
        blank).  Its order is meaningful.
    rows:
        Non-blank data rows, each mapping a column name from
        :attr:`columns` to its text value.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def columns(self) -> list[str]:
        """Ordered column names used as row keys.

        A blank header at position *i* becomes ``__EMPTY_<i>``.
        """
        return [h or f"{PLACEHOLDER_PREFIX}{i}" for i, h in enumerate(self.headers)]

    def to_document(self) -> dict[str, Any]:
        return {"headers": list(self.headers), "rows": [dict(r) for r in self.rows]}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> TabSnapshot:
        headers = [str(h) for h in doc.get("headers", [])]
        rows = [
            {str(k): str(v) for k, v in row.items()}
            for row in doc.get("rows", [])
        ]
        return cls(headers=headers, rows=rows)


@dataclass
class RunState:
    """Fingerprint map and timestamp written at the end of a committed run.

    Attributes
    ----------
    tab_fingerprints:
        Mapping of tab name to the SHA-256 fingerprint of its raw matrix.
    checked_at:
        When the committing run finished its inspection.
    """

    tab_fingerprints: dict[str, str]
    checked_at: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "tabFingerprints": dict(self.tab_fingerprints),
            "checkedAt": self.checked_at.isoformat(),
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> RunState:
        return cls(
            tab_fingerprints={str(k): str(v) for k, v in doc["tabFingerprints"].items()},
            checked_at=datetime.fromisoformat(doc["checkedAt"].replace("Z", "+00:00")),
        )


@dataclass
class LockMarker:
    """Contents of the run lock file.

    Attributes
    ----------
    owner_id:
        Identifier of the process holding the lock (``host:pid`` by default).
    started_at:
        When the lock was acquired.
    recovered_from_stale:
        ``True`` when acquisition replaced an abandoned marker.
    """

    owner_id: str
    started_at: datetime
    recovered_from_stale: bool = False

    def to_document(self) -> dict[str, Any]:
        return {
            "ownerId": self.owner_id,
            "startedAt": self.started_at.isoformat(),
            "recoveredFromStale": self.recovered_from_stale,
        }

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> LockMarker:
        return cls(
            owner_id=str(doc["ownerId"]),
            started_at=datetime.fromisoformat(doc["startedAt"].replace("Z", "+00:00")),
            recovered_from_stale=bool(doc.get("recoveredFromStale", False)),
        )


# ---------------------------------------------------------------------------
# Source data
# ---------------------------------------------------------------------------

@dataclass
class WorkbookData:
    """What a source collaborator returns.

    Attributes
    ----------
    tab_names:
        Tab names in document order.
    matrices:
        Per tab, a rectangular text matrix: row 0 holds the headers,
        subsequent rows the data.  An empty tab maps to ``[]``.
    """

    tab_names: list[str]
    matrices: dict[str, list[list[str]]]

    def matrix(self, tab: str) -> list[list[str]]:
        return self.matrices.get(tab, [])


# ---------------------------------------------------------------------------
# Diff results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChangeRecord:
    """One reported change inside a tab.

    Attributes
    ----------
    row_key:
        Stable key of the affected row (``id:...`` / ``sig:...``), or
        ``"HEADER"`` for header records.
    column:
        Affected column; ``"ROW"`` for whole-row records.
    kind:
        What happened.
    before:
        Previous text value (or description).
    after:
        Current text value (or description).
    severity:
        Reporting priority.
    """

    row_key: str
    column: str
    kind: ChangeKind
    before: str
    after: str
    severity: Severity

    def to_dict(self) -> dict[str, str]:
        return {
            "rowKey": self.row_key,
            "column": self.column,
            "kind": self.kind.value,
            "before": self.before,
            "after": self.after,
            "severity": self.severity.value,
        }


@dataclass
class GateResult:
    """Per-tab classification produced by the fingerprint gate.

    Attributes
    ----------
    statuses:
        Status for every current tab (document order) followed by every
        removed tab.
    fingerprints:
        Fingerprints of all *current* tabs; this becomes the next state.
    """

    statuses: dict[str, TabStatus] = field(default_factory=dict)
    fingerprints: dict[str, str] = field(default_factory=dict)

    def tabs_with(self, status: TabStatus) -> list[str]:
        return [tab for tab, s in self.statuses.items() if s == status]

    @property
    def candidates(self) -> list[str]:
        """Changed and added tabs, the only ones worth diffing."""
        return [
            tab for tab, s in self.statuses.items()
            if s in (TabStatus.CHANGED, TabStatus.ADDED)
        ]


@dataclass
class ChangeSet:
    """Aggregated changes of one run.

    Attributes
    ----------
    changes_by_tab:
        Non-empty record lists keyed by tab name.
    added_tabs:
        Tabs that appeared since the last commit.
    removed_tabs:
        Tabs that disappeared since the last commit.
    """

    changes_by_tab: dict[str, list[ChangeRecord]] = field(default_factory=dict)
    added_tabs: list[str] = field(default_factory=list)
    removed_tabs: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.changes_by_tab or self.added_tabs or self.removed_tabs)

    @property
    def total_changes(self) -> int:
        return sum(len(records) for records in self.changes_by_tab.values())


@dataclass
class Attachment:
    """Reference to an exported artifact.

    Attributes
    ----------
    filename:
        Name to present to the recipient.
    path:
        Location of the artifact on disk.
    mime_type:
        Content type, ``text/csv`` for delimited exports.
    """

    filename: str
    path: str
    mime_type: str = "text/csv"


@dataclass
class ChangeNotification:
    """Payload handed to the notification collaborator."""

    changes_by_tab: dict[str, list[ChangeRecord]]
    added_tabs: list[str]
    removed_tabs: list[str]
    attachments: list[Attachment] = field(default_factory=list)
    checked_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "changesByTab": {
                tab: [r.to_dict() for r in records]
                for tab, records in self.changes_by_tab.items()
            },
            "addedTabs": list(self.added_tabs),
            "removedTabs": list(self.removed_tabs),
            "attachments": [a.filename for a in self.attachments],
            "checkedAt": self.checked_at.isoformat() if self.checked_at else None,
        }


# ---------------------------------------------------------------------------
# Run result
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    """Result of :meth:`CommitCoordinator.run`.

    Attributes
    ----------
    outcome:
        How the run ended.
    phase:
        Final phase of the run state machine.
    change_set:
        Changes detected (empty when the run never staged).
    notified:
        Whether the notifier accepted the change set.
    recovered_stale_lock:
        Whether the run took over an abandoned lock.
    error:
        The error that aborted the run, if any.
    """

    outcome: RunOutcome
    phase: RunPhase = RunPhase.INIT
    change_set: ChangeSet = field(default_factory=ChangeSet)
    notified: bool = False
    recovered_stale_lock: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.outcome != RunOutcome.FAILED
