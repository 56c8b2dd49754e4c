"""Tests for models.py: documents and derived properties."""

from datetime import datetime, timezone

from sheetdelta.models import (
    Attachment,
    ChangeKind,
    ChangeNotification,
    ChangeRecord,
    LockMarker,
    RunOutcome,
    RunResult,
    Severity,
    TabSnapshot,
    WorkbookData,
    is_placeholder,
)


class TestTabSnapshot:
    def test_columns_fill_blank_headers(self):
        assert TabSnapshot(headers=["", "a", ""]).columns == ["__EMPTY_0", "a", "__EMPTY_2"]

    def test_document_round_trip(self):
        snap = TabSnapshot(headers=["id"], rows=[{"id": "1"}])
        assert TabSnapshot.from_document(snap.to_document()) == snap

    def test_from_document_stringifies(self):
        snap = TabSnapshot.from_document({"headers": ["id"], "rows": [{"id": 1}]})
        assert snap.rows == [{"id": "1"}]


def test_is_placeholder():
    assert is_placeholder("")
    assert is_placeholder("__EMPTY_4")
    assert not is_placeholder("name")


def test_lock_marker_document():
    marker = LockMarker("host:1", datetime(2026, 1, 1, tzinfo=timezone.utc), True)
    doc = marker.to_document()
    assert doc == {
        "ownerId": "host:1",
        "startedAt": "2026-01-01T00:00:00+00:00",
        "recoveredFromStale": True,
    }
    assert LockMarker.from_document(doc) == marker


def test_workbook_matrix_missing_tab():
    assert WorkbookData(tab_names=[], matrices={}).matrix("nope") == []


def test_notification_to_dict():
    record = ChangeRecord("HEADER", "email", ChangeKind.HEADER_ADDED, "", "email", Severity.STRUCTURAL)
    notification = ChangeNotification(
        changes_by_tab={"People": [record]},
        added_tabs=[],
        removed_tabs=["Old"],
        attachments=[Attachment("People.csv", "/tmp/p.csv")],
        checked_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )
    assert notification.to_dict() == {
        "changesByTab": {"People": [{
            "rowKey": "HEADER",
            "column": "email",
            "kind": "Header Added",
            "before": "",
            "after": "email",
            "severity": "STRUCTURAL",
        }]},
        "addedTabs": [],
        "removedTabs": ["Old"],
        "attachments": ["People.csv"],
        "checkedAt": "2026-01-01T00:00:00+00:00",
    }


def test_run_result_ok():
    assert RunResult(RunOutcome.LOCKED).ok
    assert RunResult(RunOutcome.NO_CHANGES).ok
    assert not RunResult(RunOutcome.FAILED).ok
