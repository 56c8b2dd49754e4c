"""Tests for diff/headers.py: header row comparison."""

from sheetdelta.diff.headers import HEADER_ROW_KEY, diff_headers
from sheetdelta.models import ChangeKind, Severity


class TestDiffHeaders:
    def test_identical(self):
        assert diff_headers(["id", "name"], ["id", "name"]) == []

    def test_added_columns_aggregated(self):
        records = diff_headers(["id"], ["id", "name", "email"])
        assert len(records) == 1
        rec = records[0]
        assert rec.kind == ChangeKind.HEADER_ADDED
        assert rec.row_key == HEADER_ROW_KEY
        assert rec.column == "name, email"
        assert rec.before == ""
        assert rec.after == "name, email"
        assert rec.severity == Severity.STRUCTURAL

    def test_removed_columns_aggregated(self):
        records = diff_headers(["id", "name", "email"], ["id"])
        assert [r.kind for r in records] == [ChangeKind.HEADER_REMOVED]
        assert records[0].before == "name, email"
        assert records[0].after == ""

    def test_reorder(self):
        records = diff_headers(["a", "b", "c"], ["c", "a", "b"])
        assert len(records) == 1
        rec = records[0]
        assert rec.kind == ChangeKind.HEADER_ORDER_CHANGED
        assert rec.column == ""
        assert rec.before == "a | b | c"
        assert rec.after == "c | a | b"

    def test_rename_is_not_a_reorder(self):
        records = diff_headers(["a", "b"], ["c", "a"])
        assert [r.kind for r in records] == [
            ChangeKind.HEADER_ADDED,
            ChangeKind.HEADER_REMOVED,
        ]

    def test_blank_headers_ignored(self):
        assert diff_headers(["id", "", " "], ["id"]) == []

    def test_from_nothing(self):
        records = diff_headers([], ["id", "name"])
        assert [r.kind for r in records] == [ChangeKind.HEADER_ADDED]
        assert records[0].after == "id, name"
