"""Typer CLI: one scheduled run, and a status view of the state directory.

Every option can also come from a ``SHEETDELTA_*`` environment variable;
a ``.env`` file in the working directory is loaded first.

Exit codes: 0 for committed, baseline, no-changes and locked runs; 1 for
a failed run; 2 for invalid options.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Optional

import typer
from dotenv import load_dotenv

from sheetdelta.commit import CommitCoordinator
from sheetdelta.config import DEFAULT_ID_COLUMN, DEFAULT_MAX_CHANGES_PER_TAB, DEFAULT_STALE_LOCK_MS, SheetDeltaConfig
from sheetdelta.errors import SheetDeltaError
from sheetdelta.export import CsvExporter
from sheetdelta.interfaces import Notifier, WorkbookSource
from sheetdelta.models import RunResult
from sheetdelta.notify import EmailNotifier, FanoutNotifier, WebhookNotifier
from sheetdelta.observability import set_level
from sheetdelta.source import FileWorkbookSource, HttpWorkbookSource
from sheetdelta.store import LockManager, SnapshotStore, StateStore

app = typer.Typer(
    name="sheetdelta",
    help="Watch a published spreadsheet and notify on changes.",
    no_args_is_help=True,
    add_completion=False,
)

StateDir = Annotated[str, typer.Option("--state-dir", envvar="SHEETDELTA_STATE_DIR", help="Directory holding state.json, run.lock and snapshots/")]


@app.callback()
def main(
    env_file: Annotated[str, typer.Option("--env-file", help="dotenv file loaded before options are resolved")] = ".env",
) -> None:
    load_dotenv(env_file, override=False)


# ---------------------------------------------------------------------------
# Collaborator construction
# ---------------------------------------------------------------------------

def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def build_source(config: SheetDeltaConfig) -> WorkbookSource:
    if _is_url(config.source_url):
        return HttpWorkbookSource.from_config(config)
    return FileWorkbookSource(config.source_url)


def build_notifier(
    config: SheetDeltaConfig,
    *,
    smtp_host: str | None,
    smtp_port: int,
    smtp_user: str | None,
    smtp_password: str | None,
    mail_from: str | None,
    mail_to: list[str],
    webhook_url: str | None,
) -> Notifier:
    notifiers: list[Notifier] = []
    if smtp_host and mail_to:
        notifiers.append(EmailNotifier(
            smtp_host,
            smtp_port,
            sender=mail_from or smtp_user or "sheetdelta@localhost",
            recipients=mail_to,
            username=smtp_user,
            password=smtp_password,
            timeout_seconds=config.notify_timeout_seconds,
        ))
    if webhook_url:
        notifiers.append(WebhookNotifier(webhook_url, timeout_seconds=config.notify_timeout_seconds))
    if not notifiers:
        raise typer.BadParameter(
            "configure a notifier: --smtp-host with --mail-to, or --webhook-url"
        )
    return notifiers[0] if len(notifiers) == 1 else FanoutNotifier(notifiers)


def _close(*resources: object) -> None:
    for resource in resources:
        close = getattr(resource, "close", None)
        if close is not None:
            close()


def _result_document(result: RunResult) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "outcome": result.outcome.value,
        "phase": result.phase.value,
        "notified": result.notified,
        "recoveredStaleLock": result.recovered_stale_lock,
        "changes": result.change_set.total_changes,
        "addedTabs": result.change_set.added_tabs,
        "removedTabs": result.change_set.removed_tabs,
    }
    if result.error is not None:
        doc["error"] = str(result.error)
        doc["code"] = getattr(result.error, "code", type(result.error).__name__)
    return doc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def run(
    source: Annotated[str, typer.Option("--source", envvar="SHEETDELTA_SOURCE", help="Published .xlsx URL or local workbook path")],
    state_dir: StateDir = "./data",
    id_column: Annotated[str, typer.Option("--id-column", envvar="SHEETDELTA_ID_COLUMN", help="Row identifier column (case-insensitive)")] = DEFAULT_ID_COLUMN,
    stale_lock_ms: Annotated[int, typer.Option("--stale-lock-ms", envvar="SHEETDELTA_STALE_LOCK_MS", help="Lock age after which it is taken over")] = DEFAULT_STALE_LOCK_MS,
    max_changes: Annotated[int, typer.Option("--max-changes", envvar="SHEETDELTA_MAX_CHANGES", help="Per-tab cap on reported change records")] = DEFAULT_MAX_CHANGES_PER_TAB,
    fetch_timeout: Annotated[float, typer.Option("--fetch-timeout", envvar="SHEETDELTA_FETCH_TIMEOUT", help="Download timeout in seconds")] = 30.0,
    notify_timeout: Annotated[float, typer.Option("--notify-timeout", envvar="SHEETDELTA_NOTIFY_TIMEOUT", help="Notification timeout in seconds")] = 30.0,
    smtp_host: Annotated[Optional[str], typer.Option("--smtp-host", envvar="SHEETDELTA_SMTP_HOST")] = None,
    smtp_port: Annotated[int, typer.Option("--smtp-port", envvar="SHEETDELTA_SMTP_PORT")] = 587,
    smtp_user: Annotated[Optional[str], typer.Option("--smtp-user", envvar="SHEETDELTA_SMTP_USER")] = None,
    smtp_password: Annotated[Optional[str], typer.Option("--smtp-password", envvar="SHEETDELTA_SMTP_PASSWORD")] = None,
    mail_from: Annotated[Optional[str], typer.Option("--mail-from", envvar="SHEETDELTA_MAIL_FROM")] = None,
    mail_to: Annotated[Optional[str], typer.Option("--mail-to", envvar="SHEETDELTA_MAIL_TO", help="Comma-separated recipients")] = None,
    webhook_url: Annotated[Optional[str], typer.Option("--webhook-url", envvar="SHEETDELTA_WEBHOOK_URL")] = None,
    no_attachments: Annotated[bool, typer.Option("--no-attachments", envvar="SHEETDELTA_NO_ATTACHMENTS", help="Do not attach CSV exports")] = False,
    log_level: Annotated[str, typer.Option("--log-level", envvar="SHEETDELTA_LOG_LEVEL")] = "INFO",
    debug_dump_diff: Annotated[bool, typer.Option("--debug-dump-diff", envvar="SHEETDELTA_DEBUG_DUMP_DIFF", help="Print the change set as JSON to stderr")] = False,
) -> None:
    """Inspect the workbook once; notify and commit if it changed."""
    set_level(log_level)
    try:
        config = SheetDeltaConfig(
            source_url=source,
            state_dir=state_dir,
            id_column=id_column,
            stale_lock_ms=stale_lock_ms,
            max_changes_per_tab=max_changes,
            fetch_timeout_seconds=fetch_timeout,
            notify_timeout_seconds=notify_timeout,
            export_attachments=not no_attachments,
            debug_dump_diff=debug_dump_diff,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    notifier = build_notifier(
        config,
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_password=smtp_password,
        mail_from=mail_from,
        mail_to=[a.strip() for a in (mail_to or "").split(",") if a.strip()],
        webhook_url=webhook_url,
    )
    workbook_source = build_source(config)
    coordinator = CommitCoordinator(
        config,
        workbook_source,
        notifier,
        exporter=CsvExporter(config.resolved_export_dir),
    )
    try:
        result = coordinator.run()
    finally:
        _close(workbook_source, notifier)

    typer.echo(json.dumps(_result_document(result)))
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def status(
    state_dir: StateDir = "./data",
) -> None:
    """Print the last check time, tracked tabs and lock holder as JSON."""
    config = SheetDeltaConfig(state_dir=state_dir)
    try:
        state = StateStore(config.state_path).load()
        snapshots = SnapshotStore(config.snapshot_dir).list_tabs()
    except SheetDeltaError as exc:
        typer.echo(json.dumps({"error": exc.message, "code": exc.code}), err=True)
        raise typer.Exit(1) from exc

    lock = LockManager(config.lock_path)
    typer.echo(json.dumps({
        "checkedAt": state.checked_at.isoformat() if state else None,
        "tabFingerprints": state.tab_fingerprints if state else {},
        "snapshots": snapshots,
        "lockHolder": lock.holder_id(),
    }, indent=2, ensure_ascii=False))
