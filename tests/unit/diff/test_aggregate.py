"""Tests for diff/aggregate.py: per-tab diff and change-set assembly."""

from sheetdelta.diff.aggregate import TabDiff, aggregate, diff_tab, summarize
from sheetdelta.models import ChangeKind, ChangeRecord, ChangeSet, Severity, TabSnapshot


def _snap(headers, *rows):
    return TabSnapshot(headers=list(headers), rows=[dict(zip(headers, r)) for r in rows])


class TestDiffTab:
    def test_header_records_before_row_records(self):
        prev = _snap(["id", "name"], ["1", "Ann"])
        curr = _snap(["id", "name", "email"], ["1", "Ann", "a@x"], ["2", "Bob", ""])
        result = diff_tab("People", prev, curr, id_column="id", max_changes=200)
        kinds = [r.kind for r in result.records]
        assert kinds == [ChangeKind.HEADER_ADDED, ChangeKind.ROW_ADDED, ChangeKind.ADDED]

    def test_against_empty_snapshot(self):
        curr = _snap(["id"], ["1"], ["2"])
        result = diff_tab("New", TabSnapshot(), curr, id_column="id", max_changes=200)
        assert [r.kind for r in result.records] == [
            ChangeKind.HEADER_ADDED,
            ChangeKind.ROW_ADDED,
            ChangeKind.ROW_ADDED,
        ]

    def test_header_records_not_capped(self):
        prev = _snap(["id"])
        curr = _snap(["id", "x"], *[[str(i), ""] for i in range(5)])
        result = diff_tab("T", prev, curr, id_column="id", max_changes=2)
        assert result.header_records[0].kind == ChangeKind.HEADER_ADDED
        assert len(result.row_records) == 3
        assert result.row_records[-1].kind == ChangeKind.TRUNCATED


class TestAggregate:
    def test_tabs_without_records_are_dropped(self):
        record = ChangeRecord("id:1", "n", ChangeKind.UPDATED, "a", "b", Severity.DATA)
        change_set = aggregate(
            [TabDiff("Quiet"), TabDiff("Busy", row_records=[record])],
            added_tabs=["New"],
            removed_tabs=["Old"],
        )
        assert list(change_set.changes_by_tab) == ["Busy"]
        assert change_set.added_tabs == ["New"]
        assert change_set.removed_tabs == ["Old"]
        assert change_set.total_changes == 1
        assert change_set.is_empty is False

    def test_empty(self):
        change_set = aggregate([TabDiff("Quiet")], added_tabs=[], removed_tabs=[])
        assert change_set.is_empty is True

    def test_removed_tab_alone_is_a_change(self):
        assert aggregate([], added_tabs=[], removed_tabs=["Old"]).is_empty is False


class TestSummarize:
    def test_counts(self):
        records = [
            ChangeRecord("HEADER", "x", ChangeKind.HEADER_ADDED, "", "x", Severity.STRUCTURAL),
            ChangeRecord("id:1", "x", ChangeKind.ADDED, "", "1", Severity.DATA),
            ChangeRecord("id:2", "x", ChangeKind.ADDED, "", "2", Severity.DATA),
            ChangeRecord("", "", ChangeKind.TRUNCATED, "300", "...", Severity.INFO),
        ]
        counts = summarize(ChangeSet({"T": records}, ["A"], []))
        assert counts == {
            "tabs_added": 1,
            "tabs_removed": 0,
            "tabs_changed": 1,
            "structural": 1,
            "data": 2,
            "info": 1,
        }
