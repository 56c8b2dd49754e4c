"""Human-readable change report.

The report is written as Markdown (used as the plain-text body and by
chat webhooks) and rendered to HTML with mistune for e-mail clients.
"""

from __future__ import annotations

import re

import mistune

from sheetdelta.diff.aggregate import summarize
from sheetdelta.models import ChangeNotification, ChangeRecord, ChangeSet, Severity

_ESCAPE_RE = re.compile(r"([\\`*_{}\[\]()#+\-.!|<>])")

_to_html = mistune.create_markdown(escape=True, plugins=["table", "strikethrough"])

BLANK = "*blank*"


def markdown_escape(text: str) -> str:
    """Escape Markdown syntax so cell values render literally in a table."""
    return _ESCAPE_RE.sub(r"\\\1", " ".join(text.split()))


def _cell(value: str) -> str:
    return markdown_escape(value) if value.strip() else BLANK


def _tab_severity(records: list[ChangeRecord]) -> str:
    if any(r.severity == Severity.STRUCTURAL for r in records):
        return Severity.STRUCTURAL.value
    return Severity.DATA.value


def _change_set(notification: ChangeNotification) -> ChangeSet:
    return ChangeSet(
        changes_by_tab=notification.changes_by_tab,
        added_tabs=notification.added_tabs,
        removed_tabs=notification.removed_tabs,
    )


def build_subject(notification: ChangeNotification) -> str:
    counts = summarize(_change_set(notification))
    parts = []
    if counts["structural"] or counts["tabs_added"] or counts["tabs_removed"]:
        parts.append("Structural")
    if counts["data"]:
        parts.append("Data")
    kinds = " & ".join(parts) or "Sheet"
    return f"Sheet updated: {kinds} changes"


def render_markdown(notification: ChangeNotification) -> str:
    """Render *notification* as a Markdown report."""
    counts = summarize(_change_set(notification))
    lines = ["## Sheet Update Summary", ""]
    if notification.checked_at is not None:
        lines += [f"Checked at {notification.checked_at.isoformat()}", ""]
    lines += [
        f"- **Tabs Added:** {counts['tabs_added']}",
        f"- **Tabs Removed:** {counts['tabs_removed']}",
        f"- **Structural Changes:** {counts['structural']}",
        f"- **Data Changes:** {counts['data']}",
        "",
    ]

    for title, tabs in (
        ("Tabs Added", notification.added_tabs),
        ("Tabs Removed", notification.removed_tabs),
    ):
        if tabs:
            lines += [f"### [STRUCTURAL] {title}", ""]
            lines += [f"- {markdown_escape(tab)}" for tab in tabs]
            lines.append("")

    for tab, records in notification.changes_by_tab.items():
        lines += [
            f"### Tab: {markdown_escape(tab)} ({len(records)} changes) "
            f"\\[{_tab_severity(records)}\\]",
            "",
            "| Row | Column | Change | Before | After |",
            "| --- | --- | --- | --- | --- |",
        ]
        for r in records:
            lines.append(
                f"| {_cell(r.row_key)} | {_cell(r.column)} | **{r.kind.value}** "
                f"| {_cell(r.before)} | {_cell(r.after)} |"
            )
        lines.append("")

    if notification.attachments:
        names = ", ".join(markdown_escape(a.filename) for a in notification.attachments)
        lines += [f"Attached exports: {names}", ""]

    return "\n".join(lines)


def render_html(notification: ChangeNotification) -> str:
    """Render *notification* as an HTML e-mail body."""
    body = _to_html(render_markdown(notification))
    return (
        '<div style="font-family:Arial,sans-serif">'
        f"{body}"
        '<p style="font-size:12px;color:#777">Auto-generated by sheetdelta</p>'
        "</div>"
    )
