"""Turn a raw tab matrix into a :class:`TabSnapshot`."""

from __future__ import annotations

from sheetdelta.models import TabSnapshot


def _cell(row: list[str], index: int) -> str:
    if index < len(row):
        value = row[index]
        return "" if value is None else str(value)
    return ""


def is_blank_row(row: dict[str, str]) -> bool:
    return all(not value.strip() for value in row.values())


def extract_snapshot(matrix: list[list[str]]) -> TabSnapshot:
    """Build the ``{headers, rows}`` view of *matrix*.

    Row 0 supplies the headers (trimmed).  Each later row becomes a
    mapping over :attr:`TabSnapshot.columns`; cells beyond the header
    width are ignored and missing cells read as ``""``.  Rows whose cells
    are all blank are dropped.  When a header repeats, the rightmost
    column wins for that name.
    """
    if not matrix:
        return TabSnapshot()

    headers = [_cell(matrix[0], i).strip() for i in range(len(matrix[0]))]
    snapshot = TabSnapshot(headers=headers)
    columns = snapshot.columns

    for raw in matrix[1:]:
        row = {column: _cell(raw, i) for i, column in enumerate(columns)}
        if not is_blank_row(row):
            snapshot.rows.append(row)
    return snapshot
