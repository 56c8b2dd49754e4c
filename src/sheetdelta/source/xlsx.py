"""Decode an ``.xlsx`` workbook into per-tab text matrices.

Only cell values are read (``data_only=True`` gives the cached result of
formulas); styles, comments and types are discarded and every value is
rendered as text.  Trailing empty rows and columns are trimmed so that
the used-range bookkeeping of the producing application does not leak
into the fingerprint.
"""

from __future__ import annotations

import datetime as dt
import io
import zipfile
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from sheetdelta.errors import ParseError
from sheetdelta.models import WorkbookData


def cell_text(value: Any) -> str:
    """Render one cell value as text.

    >>> cell_text(None), cell_text(3.0), cell_text(2.5), cell_text(True)
    ('', '3', '2.5', 'TRUE')
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dt.datetime):
        if value.time() == dt.time(0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (dt.date, dt.time)):
        return value.isoformat()
    return str(value)


def to_matrix(rows: list[tuple[Any, ...]]) -> list[list[str]]:
    """Convert raw row tuples to a trimmed, rectangular text matrix."""
    matrix = [[cell_text(v) for v in row] for row in rows]

    while matrix and not any(matrix[-1]):
        matrix.pop()

    width = 0
    for row in matrix:
        for i in range(len(row) - 1, -1, -1):
            if row[i]:
                width = max(width, i + 1)
                break

    return [(row + [""] * width)[:width] for row in matrix]


def parse_workbook(data: bytes) -> WorkbookData:
    """Parse ``.xlsx`` bytes.

    Raises
    ------
    ParseError
        If *data* is not a readable workbook.
    """
    try:
        wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError, OSError) as exc:
        raise ParseError(
            message=f"Not a readable .xlsx workbook: {exc}",
            context={"size_bytes": len(data), "reason": type(exc).__name__},
            cause=exc,
        ) from exc

    try:
        tab_names: list[str] = []
        matrices: dict[str, list[list[str]]] = {}
        for ws in wb.worksheets:
            tab_names.append(ws.title)
            matrices[ws.title] = to_matrix(list(ws.iter_rows(values_only=True)))
    except (KeyError, ValueError, TypeError) as exc:
        raise ParseError(
            message=f"Workbook contents could not be read: {exc}",
            context={"size_bytes": len(data), "reason": type(exc).__name__},
            cause=exc,
        ) from exc
    finally:
        wb.close()

    return WorkbookData(tab_names=tab_names, matrices=matrices)
