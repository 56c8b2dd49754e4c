"""Tests for diff/extract.py: matrix to snapshot."""

from sheetdelta.diff.extract import extract_snapshot, is_blank_row
from sheetdelta.models import TabSnapshot


class TestExtractSnapshot:
    def test_empty_matrix(self):
        assert extract_snapshot([]) == TabSnapshot()

    def test_headers_trimmed(self):
        snap = extract_snapshot([[" id ", "name  "], ["1", "Ann"]])
        assert snap.headers == ["id", "name"]
        assert snap.rows == [{"id": "1", "name": "Ann"}]

    def test_blank_header_gets_placeholder_column(self):
        snap = extract_snapshot([["id", "", "name"], ["1", "x", "Ann"]])
        assert snap.headers == ["id", "", "name"]
        assert snap.columns == ["id", "__EMPTY_1", "name"]
        assert snap.rows == [{"id": "1", "__EMPTY_1": "x", "name": "Ann"}]

    def test_blank_rows_dropped(self):
        snap = extract_snapshot([["id", "name"], ["", "  "], ["2", "Bob"], ["", ""]])
        assert snap.rows == [{"id": "2", "name": "Bob"}]

    def test_short_rows_padded_and_long_rows_cut(self):
        snap = extract_snapshot([["id", "name"], ["1"], ["2", "Bob", "extra"]])
        assert snap.rows == [
            {"id": "1", "name": ""},
            {"id": "2", "name": "Bob"},
        ]

    def test_repeated_header_rightmost_wins(self):
        snap = extract_snapshot([["a", "a"], ["1", "2"]])
        assert snap.rows == [{"a": "2"}]

    def test_header_only(self):
        snap = extract_snapshot([["id", "name"]])
        assert snap.headers == ["id", "name"]
        assert snap.rows == []


class TestIsBlankRow:
    def test_whitespace_is_blank(self):
        assert is_blank_row({"a": " ", "b": ""}) is True

    def test_value_is_not_blank(self):
        assert is_blank_row({"a": " ", "b": "0"}) is False
