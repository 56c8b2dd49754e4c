"""Commit coordinator: the stage / notify / commit protocol.

A run holds the lock, fetches the workbook, stages the current
extraction of every changed or added tab in memory, hands the change set
to the notifier, and only after the notifier accepts it persists the
staged snapshots and the new state.  Any failure before the commit
leaves the state directory exactly as it was, so the next scheduled run
re-fetches and re-diffs the same content (at-least-once notification).

A failure after delivery but before the commit completes can cause the
next run to notify the same change again.  That duplicate is accepted in
exchange for never losing a change.
"""

from __future__ import annotations

import json
import sys
import time
from collections.abc import Callable
from datetime import datetime, timezone

from sheetdelta.config import SheetDeltaConfig
from sheetdelta.diff import aggregate, classify_tabs, diff_tab, extract_snapshot, summarize
from sheetdelta.diff.aggregate import TabDiff
from sheetdelta.errors import LockContentionError, NotifyError, SheetDeltaError
from sheetdelta.interfaces import Exporter, Notifier, WorkbookSource
from sheetdelta.models import (
    Attachment,
    ChangeNotification,
    ChangeSet,
    GateResult,
    RunOutcome,
    RunPhase,
    RunResult,
    RunState,
    TabSnapshot,
    TabStatus,
    WorkbookData,
)
from sheetdelta.observability import get_logger, resolve_metrics
from sheetdelta.store import LockManager, SnapshotStore, StateStore

from .phases import RunStateMachine

log = get_logger("sheetdelta.commit")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommitCoordinator:
    """Run one inspection of the watched workbook.

    Parameters
    ----------
    config:
        Run configuration.
    source:
        Where the workbook comes from.
    notifier:
        Receives the change set; the commit is gated on its result.
    snapshot_store:
        Defaults to a :class:`SnapshotStore` under ``config.snapshot_dir``.
    state_store:
        Defaults to a :class:`StateStore` at ``config.state_path``.
    lock:
        Defaults to a :class:`LockManager` at ``config.lock_path``.
    exporter:
        Optional; when set and ``config.export_attachments`` is true, the
        affected tabs are exported and attached to the notification.
    clock:
        Returns the timestamp recorded as ``checkedAt``.
    """

    def __init__(
        self,
        config: SheetDeltaConfig,
        source: WorkbookSource,
        notifier: Notifier,
        *,
        snapshot_store: SnapshotStore | None = None,
        state_store: StateStore | None = None,
        lock: LockManager | None = None,
        exporter: Exporter | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._source = source
        self._notifier = notifier
        self._exporter = exporter
        self._snapshots = snapshot_store or SnapshotStore(config.snapshot_dir)
        self._state = state_store or StateStore(config.state_path)
        self._lock = lock or LockManager(
            config.lock_path,
            stale_after_ms=config.stale_lock_ms,
            owner_id=config.owner_id,
            metrics=config.metrics,
        )
        self._clock = clock or _utcnow
        self._metrics = resolve_metrics(config.metrics)

    # -- public API --------------------------------------------------------

    def run(self) -> RunResult:
        """Execute one run and report how it ended.

        Never raises: lock contention yields ``RunOutcome.LOCKED`` and
        every failure yields ``RunOutcome.FAILED`` with the error
        attached.  The lock is released on every path that acquired it.
        """
        t0 = time.monotonic()

        try:
            marker = self._lock.acquire()
        except LockContentionError as exc:
            log.info(
                "Another run is active; exiting without changes",
                extra={"extra_fields": {"op": "run", **exc.context}},
            )
            return self._finish(RunResult(outcome=RunOutcome.LOCKED), t0)
        except SheetDeltaError as exc:
            log.error(
                "Could not acquire run lock",
                extra={"extra_fields": {"op": "run", "code": exc.code, "error": exc.message}},
            )
            return self._finish(RunResult(outcome=RunOutcome.FAILED, error=exc), t0)

        machine = RunStateMachine()
        result = RunResult(
            outcome=RunOutcome.FAILED,
            recovered_stale_lock=marker.recovered_from_stale,
        )
        try:
            self._run_locked(machine, result)
        except Exception as exc:
            # Run boundary: every failure aborts the run without committing.
            failed_in = machine.phase
            machine.abort()
            result.outcome = RunOutcome.FAILED
            result.error = exc
            log.error(
                "Run aborted",
                exc_info=True,
                extra={"extra_fields": {
                    "op": "run",
                    "code": getattr(exc, "code", type(exc).__name__),
                    "error": str(exc),
                    "phase": failed_in.value,
                }},
            )
        finally:
            self._lock.release()

        result.phase = machine.phase
        return self._finish(result, t0)

    # -- phases ------------------------------------------------------------

    def _run_locked(self, machine: RunStateMachine, result: RunResult) -> None:
        previous = self._state.load()
        first_run = previous is None
        workbook = self._fetch()

        # Stage
        gate = classify_tabs(workbook, previous.tab_fingerprints if previous else {})
        staged, change_set = self._stage(workbook, gate, first_run=first_run)
        result.change_set = change_set
        machine.transition(RunPhase.STAGED)
        self._log_staged(gate, change_set)

        checked_at = self._clock()

        # Notify
        if first_run:
            log.info(
                "First run: committing baseline without notifying",
                extra={"extra_fields": {"op": "run", "tabs": len(staged)}},
            )
            result.outcome = RunOutcome.BASELINE
        elif change_set.is_empty:
            result.outcome = RunOutcome.NO_CHANGES
        else:
            self._notify(machine, workbook, change_set, checked_at)
            machine.transition(RunPhase.NOTIFIED)
            result.notified = True
            result.outcome = RunOutcome.COMMITTED

        # Commit
        self._commit(staged, gate, checked_at)
        machine.transition(RunPhase.COMMITTED)

    def _fetch(self) -> WorkbookData:
        t0 = time.monotonic()
        workbook = self._source.fetch()
        elapsed_ms = (time.monotonic() - t0) * 1000
        self._metrics.timing("sheetdelta.fetch_duration_ms", elapsed_ms)
        log.info(
            "Workbook fetched",
            extra={"extra_fields": {
                "op": "fetch",
                "tabs": len(workbook.tab_names),
                "duration_ms": round(elapsed_ms, 1),
            }},
        )
        return workbook

    def _stage(
        self,
        workbook: WorkbookData,
        gate: GateResult,
        *,
        first_run: bool,
    ) -> tuple[dict[str, TabSnapshot], ChangeSet]:
        staged: dict[str, TabSnapshot] = {}
        tab_diffs: list[TabDiff] = []

        for tab in gate.candidates:
            current = extract_snapshot(workbook.matrix(tab))
            staged[tab] = current
            if first_run:
                continue
            prior = self._snapshots.load(tab) or TabSnapshot()
            tab_diffs.append(diff_tab(
                tab,
                prior,
                current,
                id_column=self._config.id_column,
                max_changes=self._config.max_changes_per_tab,
            ))

        change_set = aggregate(
            tab_diffs,
            added_tabs=gate.tabs_with(TabStatus.ADDED),
            removed_tabs=gate.tabs_with(TabStatus.REMOVED),
        )
        return staged, change_set

    def _notify(
        self,
        machine: RunStateMachine,
        workbook: WorkbookData,
        change_set: ChangeSet,
        checked_at: datetime,
    ) -> None:
        notification = ChangeNotification(
            changes_by_tab=change_set.changes_by_tab,
            added_tabs=change_set.added_tabs,
            removed_tabs=change_set.removed_tabs,
            attachments=self._export(workbook, change_set),
            checked_at=checked_at,
        )
        try:
            delivered = self._notifier.notify(notification)
        except Exception as exc:
            machine.transition(RunPhase.NOTIFY_FAILED)
            self._metrics.increment("sheetdelta.notify_total", tags={"status": "error"})
            if isinstance(exc, NotifyError):
                raise
            raise NotifyError(
                message=f"Notifier raised {type(exc).__name__}: {exc}",
                context={"notifier": type(self._notifier).__name__},
                cause=exc,
            ) from exc

        if not delivered:
            machine.transition(RunPhase.NOTIFY_FAILED)
            self._metrics.increment("sheetdelta.notify_total", tags={"status": "rejected"})
            raise NotifyError(
                message="Notifier reported delivery failure",
                context={"notifier": type(self._notifier).__name__},
            )

        self._metrics.increment("sheetdelta.notify_total", tags={"status": "ok"})
        log.info(
            "Changes detected, notification sent",
            extra={"extra_fields": {
                "op": "notify",
                "attachments": len(notification.attachments),
                **summarize(change_set),
            }},
        )

    def _export(self, workbook: WorkbookData, change_set: ChangeSet) -> list[Attachment]:
        if self._exporter is None or not self._config.export_attachments:
            return []
        tabs = list(change_set.changes_by_tab)
        tabs += [t for t in change_set.added_tabs if t not in change_set.changes_by_tab]
        return [self._exporter.export(tab, workbook.matrix(tab)) for tab in tabs]

    def _commit(
        self,
        staged: dict[str, TabSnapshot],
        gate: GateResult,
        checked_at: datetime,
    ) -> None:
        # Snapshots first, state last: after a crash in between, the old
        # fingerprints send every tab back through the diff, and only tabs
        # whose snapshot was not yet written report changes again.
        for tab, snapshot in staged.items():
            self._snapshots.save(tab, snapshot)
        removed = gate.tabs_with(TabStatus.REMOVED)
        for tab in removed:
            self._snapshots.delete(tab)
        self._state.save(RunState(tab_fingerprints=dict(gate.fingerprints), checked_at=checked_at))

        log.info(
            "Run committed",
            extra={"extra_fields": {
                "op": "commit",
                "snapshots_written": len(staged),
                "snapshots_deleted": len(removed),
                "checked_at": checked_at.isoformat(),
            }},
        )

    # -- reporting ---------------------------------------------------------

    def _log_staged(self, gate: GateResult, change_set: ChangeSet) -> None:
        for status in TabStatus:
            count = len(gate.tabs_with(status))
            if count:
                self._metrics.increment(
                    "sheetdelta.tabs_total", count, tags={"status": status.value},
                )
        counts = summarize(change_set)
        for severity in ("structural", "data", "info"):
            if counts[severity]:
                self._metrics.increment(
                    "sheetdelta.changes_total", counts[severity], tags={"severity": severity},
                )
        log.info(
            "Run staged",
            extra={"extra_fields": {
                "op": "stage",
                "candidates": len(gate.candidates),
                "unchanged": len(gate.tabs_with(TabStatus.UNCHANGED)),
                **counts,
            }},
        )
        if self._config.debug_dump_diff:
            dump = ChangeNotification(
                changes_by_tab=change_set.changes_by_tab,
                added_tabs=change_set.added_tabs,
                removed_tabs=change_set.removed_tabs,
            ).to_dict()
            print(json.dumps(dump, indent=2, ensure_ascii=False), file=sys.stderr)

    def _finish(self, result: RunResult, t0: float) -> RunResult:
        self._metrics.increment("sheetdelta.runs_total", tags={"outcome": result.outcome.value})
        self._metrics.timing("sheetdelta.run_duration_ms", (time.monotonic() - t0) * 1000)
        return result
