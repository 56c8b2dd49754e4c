"""Run configuration for sheetdelta.

:class:`SheetDeltaConfig` is a dataclass that captures every tuneable
knob of a run.  It is passed to the :class:`CommitCoordinator` and to the
default collaborators built by the CLI.  Collaborators themselves are
injected separately; nothing here is a process-wide singleton.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

DEFAULT_ID_COLUMN = "id"
DEFAULT_STALE_LOCK_MS = 600_000
DEFAULT_MAX_CHANGES_PER_TAB = 200

STATE_FILENAME = "state.json"
LOCK_FILENAME = "run.lock"
SNAPSHOT_DIRNAME = "snapshots"
EXPORT_DIRNAME = "exports"


@dataclass
class SheetDeltaConfig:
    """Complete configuration for a monitoring run.

    Parameters
    ----------
    source_url:
        Published ``.xlsx`` URL (or local path) of the watched document.
    state_dir:
        Directory holding ``state.json``, ``run.lock`` and ``snapshots/``.
    id_column:
        Name of the row identifier column, matched case-insensitively.
    stale_lock_ms:
        Age in milliseconds after which a lock marker is presumed
        abandoned and may be taken over.
    max_changes_per_tab:
        Cap on row-level change records reported per tab.  Structural
        records are kept ahead of data records when truncating.
    fetch_timeout_seconds:
        HTTP timeout for downloading the workbook.
    notify_timeout_seconds:
        Timeout for the notification transport (SMTP / webhook).
    retry_max_attempts:
        Total download attempts for retryable failures.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Add random jitter to backoff intervals.
    export_attachments:
        Export changed tabs as CSV and attach them to notifications.
    export_dir:
        Where CSV exports are written.  Defaults to ``<state_dir>/exports``.
    owner_id:
        Identifier written into the lock marker.  Defaults to ``host:pid``.
    metrics:
        Optional :class:`MetricsHook` implementation.
    debug_dump_diff:
        Write the computed change set as JSON to *stderr*.
    """

    # ── Source ──────────────────────────────────────────────────────────
    source_url: str = ""

    # ── Storage ─────────────────────────────────────────────────────────
    state_dir: str = "./data"

    # ── Diff ────────────────────────────────────────────────────────────
    id_column: str = DEFAULT_ID_COLUMN

    max_changes_per_tab: int = DEFAULT_MAX_CHANGES_PER_TAB

    # ── Lock ────────────────────────────────────────────────────────────
    stale_lock_ms: int = DEFAULT_STALE_LOCK_MS

    owner_id: str | None = None

    # ── Timeouts & retry ────────────────────────────────────────────────
    fetch_timeout_seconds: float = 30.0

    notify_timeout_seconds: float = 30.0

    retry_max_attempts: int = 3

    retry_base_delay: float = 1.0

    retry_max_delay: float = 30.0

    retry_jitter: bool = True

    # ── Export ──────────────────────────────────────────────────────────
    export_attachments: bool = True

    export_dir: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_diff: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.id_column.strip():
            raise ValueError("id_column must not be blank")
        if self.stale_lock_ms <= 0:
            raise ValueError(f"stale_lock_ms must be > 0, got {self.stale_lock_ms}")
        if self.max_changes_per_tab < 1:
            raise ValueError(
                f"max_changes_per_tab must be >= 1, got {self.max_changes_per_tab}"
            )
        if self.fetch_timeout_seconds <= 0:
            raise ValueError(
                f"fetch_timeout_seconds must be > 0, got {self.fetch_timeout_seconds}"
            )
        if self.notify_timeout_seconds <= 0:
            raise ValueError(
                f"notify_timeout_seconds must be > 0, got {self.notify_timeout_seconds}"
            )
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")

    # ── Derived paths ───────────────────────────────────────────────────

    @property
    def state_path(self) -> str:
        return os.path.join(self.state_dir, STATE_FILENAME)

    @property
    def lock_path(self) -> str:
        return os.path.join(self.state_dir, LOCK_FILENAME)

    @property
    def snapshot_dir(self) -> str:
        return os.path.join(self.state_dir, SNAPSHOT_DIRNAME)

    @property
    def resolved_export_dir(self) -> str:
        return self.export_dir or os.path.join(self.state_dir, EXPORT_DIRNAME)
