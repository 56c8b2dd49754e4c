"""Tests for notify/report.py: Markdown and HTML change reports."""

from datetime import datetime, timezone

from sheetdelta.models import Attachment, ChangeKind, ChangeNotification, ChangeRecord, Severity
from sheetdelta.notify.report import build_subject, markdown_escape, render_html, render_markdown


def _notification(records=None, added=(), removed=(), **kwargs):
    return ChangeNotification(
        changes_by_tab={"People": records} if records else {},
        added_tabs=list(added),
        removed_tabs=list(removed),
        **kwargs,
    )


UPDATE = ChangeRecord("id:2", "name", ChangeKind.UPDATED, "Bob", "Robert", Severity.DATA)
ROW_ADDED = ChangeRecord("id:3", "ROW", ChangeKind.ROW_ADDED, "", "Row created", Severity.STRUCTURAL)


class TestMarkdownEscape:
    def test_table_syntax_escaped(self):
        assert markdown_escape("a|b") == "a\\|b"
        assert markdown_escape("*bold*") == "\\*bold\\*"

    def test_newlines_collapsed(self):
        assert markdown_escape("line one\nline two") == "line one line two"


class TestRenderMarkdown:
    def test_summary_counts(self):
        text = render_markdown(_notification([UPDATE, ROW_ADDED], added=["New"]))
        assert "## Sheet Update Summary" in text
        assert "- **Tabs Added:** 1" in text
        assert "- **Tabs Removed:** 0" in text
        assert "- **Structural Changes:** 1" in text
        assert "- **Data Changes:** 1" in text

    def test_tab_table(self):
        text = render_markdown(_notification([UPDATE]))
        assert "### Tab: People (1 changes) \\[DATA\\]" in text
        assert "| Row | Column | Change | Before | After |" in text
        assert "| id:2 | name | **Updated** | Bob | Robert |" in text

    def test_structural_tab_label_and_blank_cells(self):
        text = render_markdown(_notification([ROW_ADDED]))
        assert "\\[STRUCTURAL\\]" in text
        assert "| id:3 | ROW | **Row Added** | *blank* | Row created |" in text

    def test_pipes_in_values_escaped(self):
        record = ChangeRecord("id:1", "note", ChangeKind.ADDED, "", "a|b", Severity.DATA)
        assert "| *blank* | a\\|b |" in render_markdown(_notification([record]))

    def test_added_and_removed_tabs_listed(self):
        text = render_markdown(_notification(added=["Stock"], removed=["Archive"]))
        assert "### [STRUCTURAL] Tabs Added" in text
        assert "- Stock" in text
        assert "### [STRUCTURAL] Tabs Removed" in text
        assert "- Archive" in text

    def test_checked_at_and_attachments(self):
        checked = datetime(2026, 10, 19, 6, 0, tzinfo=timezone.utc)
        text = render_markdown(_notification(
            [UPDATE],
            checked_at=checked,
            attachments=[Attachment("People.csv", "/tmp/People.csv")],
        ))
        assert f"Checked at {checked.isoformat()}" in text
        assert "Attached exports: People\\.csv" in text


class TestRenderHtml:
    def test_table_rendered(self):
        html = render_html(_notification([UPDATE]))
        assert "<table>" in html
        assert "<strong>Updated</strong>" in html
        assert "Robert" in html

    def test_values_are_escaped(self):
        record = ChangeRecord("id:1", "x", ChangeKind.ADDED, "", "<script>", Severity.DATA)
        html = render_html(_notification([record]))
        assert "<script>" not in html
        assert "&lt;script&gt;" in html


class TestBuildSubject:
    def test_data_only(self):
        assert build_subject(_notification([UPDATE])) == "Sheet updated: Data changes"

    def test_structural_and_data(self):
        subject = build_subject(_notification([UPDATE, ROW_ADDED]))
        assert subject == "Sheet updated: Structural & Data changes"

    def test_tab_removal_is_structural(self):
        assert build_subject(_notification(removed=["Old"])) == "Sheet updated: Structural changes"
