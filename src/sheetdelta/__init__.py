"""sheetdelta: Crash-safe change detection for published spreadsheets.

Public re-exports
-----------------

* **Engine:** :class:`CommitCoordinator`
* **Configuration:** :class:`SheetDeltaConfig`
* **Errors:** Every :class:`SheetDeltaError` subclass and :class:`ErrorCode`
* **Models:** Snapshot, change and result dataclasses plus their enums

Usage::

    from sheetdelta import CommitCoordinator, SheetDeltaConfig
    from sheetdelta.notify import WebhookNotifier
    from sheetdelta.source import HttpWorkbookSource

    config = SheetDeltaConfig(source_url="https://.../pub?output=xlsx")
    result = CommitCoordinator(
        config,
        HttpWorkbookSource.from_config(config),
        WebhookNotifier("https://hooks.example.com/sheet"),
    ).run()
"""

from __future__ import annotations

__version__ = "0.1.0"

# ── Engine ─────────────────────────────────────────────────────────────
from sheetdelta.commit import CommitCoordinator

# ── Configuration ───────────────────────────────────────────────────────
from sheetdelta.config import SheetDeltaConfig

# ── Errors ──────────────────────────────────────────────────────────────
from sheetdelta.errors import (
    ErrorCode,
    FetchError,
    InvalidTransitionError,
    LockContentionError,
    NetworkError,
    NotifyError,
    ParseError,
    PersistError,
    RetryExhaustedError,
    SheetDeltaError,
    StoreCorruptError,
)

# ── Models ──────────────────────────────────────────────────────────────
from sheetdelta.models import (
    Attachment,
    ChangeKind,
    ChangeNotification,
    ChangeRecord,
    ChangeSet,
    LockMarker,
    RunOutcome,
    RunPhase,
    RunResult,
    RunState,
    Severity,
    TabSnapshot,
    TabStatus,
    WorkbookData,
)

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    "__version__",
    # Engine
    "CommitCoordinator",
    # Configuration
    "SheetDeltaConfig",
    # Error base + code enum
    "SheetDeltaError",
    "ErrorCode",
    # Run errors
    "LockContentionError",
    "FetchError",
    "NetworkError",
    "RetryExhaustedError",
    "ParseError",
    "NotifyError",
    "PersistError",
    "StoreCorruptError",
    "InvalidTransitionError",
    # Models: persisted documents
    "TabSnapshot",
    "RunState",
    "LockMarker",
    # Models: change reporting
    "WorkbookData",
    "ChangeRecord",
    "ChangeSet",
    "ChangeNotification",
    "Attachment",
    "RunResult",
    # Models: enums
    "ChangeKind",
    "Severity",
    "TabStatus",
    "RunPhase",
    "RunOutcome",
]
