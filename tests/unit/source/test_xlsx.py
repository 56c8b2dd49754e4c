"""Tests for source/xlsx.py: workbook decoding."""

import datetime as dt
import io

import pytest
from openpyxl import Workbook

from sheetdelta.errors import ErrorCode, ParseError
from sheetdelta.source.xlsx import cell_text, parse_workbook, to_matrix


def _xlsx(sheets: dict[str, list[list]]) -> bytes:
    wb = Workbook()
    wb.remove(wb.active)
    for title, rows in sheets.items():
        ws = wb.create_sheet(title)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


class TestCellText:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("text", "text"),
            (3, "3"),
            (3.0, "3"),
            (2.5, "2.5"),
            (True, "TRUE"),
            (False, "FALSE"),
            (dt.datetime(2026, 1, 2), "2026-01-02"),
            (dt.datetime(2026, 1, 2, 13, 30), "2026-01-02 13:30:00"),
            (dt.date(2026, 1, 2), "2026-01-02"),
            (dt.time(8, 15), "08:15:00"),
        ],
    )
    def test_rendering(self, value, expected):
        assert cell_text(value) == expected


class TestToMatrix:
    def test_trailing_rows_and_columns_trimmed(self):
        rows = [("a", "b", None), ("1", None, None), (None, None, None)]
        assert to_matrix(rows) == [["a", "b"], ["1", ""]]

    def test_ragged_rows_padded(self):
        assert to_matrix([("a",), ("1", "2")]) == [["a", ""], ["1", "2"]]

    def test_all_empty(self):
        assert to_matrix([(None, None)]) == []

    def test_interior_blank_row_kept(self):
        assert to_matrix([("a",), (None,), ("b",)]) == [["a"], [""], ["b"]]


class TestParseWorkbook:
    def test_tabs_in_document_order(self):
        data = _xlsx({
            "People": [["id", "name"], [1, "Ann"], [2, None]],
            "Orders": [["order", "qty", "paid"], ["A-1", 2.5, True]],
        })
        workbook = parse_workbook(data)
        assert workbook.tab_names == ["People", "Orders"]
        assert workbook.matrix("People") == [["id", "name"], ["1", "Ann"], ["2", ""]]
        assert workbook.matrix("Orders") == [["order", "qty", "paid"], ["A-1", "2.5", "TRUE"]]

    def test_empty_tab(self):
        workbook = parse_workbook(_xlsx({"Blank": []}))
        assert workbook.tab_names == ["Blank"]
        assert workbook.matrix("Blank") == []

    def test_garbage_bytes(self):
        with pytest.raises(ParseError) as exc_info:
            parse_workbook(b"<html>not a workbook</html>")
        assert exc_info.value.code == ErrorCode.PARSE_ERROR
        assert exc_info.value.context["size_bytes"] == 27
