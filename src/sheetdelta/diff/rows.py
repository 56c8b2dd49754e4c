"""Stable-key row and cell diff.

Rows are matched by key, never by position.  A row carrying a value in
the identifier column is keyed ``id:<value>``; any other row is keyed by
a signature of its non-blank cells, ``sig:<hash>``.  Matching by position
would turn a single inserted or deleted row into a false change on every
row below it.

Within one side, repeated keys get a positional suffix (``#2``, ``#3``...)
in first-seen order, so the *n*-th occurrence on one side is compared
with the *n*-th occurrence on the other.
"""

from __future__ import annotations

from collections.abc import Iterable

from sheetdelta.config import DEFAULT_ID_COLUMN, DEFAULT_MAX_CHANGES_PER_TAB
from sheetdelta.models import ChangeKind, ChangeRecord, Severity, is_placeholder
from sheetdelta.utils.hashing import hash_json

ROW_COLUMN = "ROW"
SIGNATURE_LENGTH = 16


def find_id_column(columns: Iterable[str], id_column: str) -> str | None:
    """Return the column whose name matches *id_column* case-insensitively."""
    wanted = id_column.strip().casefold()
    for column in columns:
        if column.strip().casefold() == wanted:
            return column
    return None


def row_signature(row: dict[str, str]) -> str:
    """Hash of the row's non-blank, labeled cells, independent of column order."""
    pairs = sorted(
        (column, value.strip())
        for column, value in row.items()
        if not is_placeholder(column) and value.strip()
    )
    return hash_json(pairs)[:SIGNATURE_LENGTH]


def row_key(row: dict[str, str], id_column: str = DEFAULT_ID_COLUMN) -> str:
    """Derive the stable key of *row* (before duplicate disambiguation)."""
    column = find_id_column(row, id_column)
    if column is not None:
        value = row[column].strip()
        if value:
            return f"id:{value}"
    return f"sig:{row_signature(row)}"


def keyed_rows(
    rows: list[dict[str, str]],
    id_column: str = DEFAULT_ID_COLUMN,
) -> dict[str, dict[str, str]]:
    """Map each row to a key that is unique within *rows*.

    The first occurrence of a key is kept as-is; later ones become
    ``key#2``, ``key#3`` and so on.  A suffix that collides with a key
    already taken (an id that itself contains ``#``) is skipped.
    Insertion order follows *rows*.
    """
    seen: dict[str, int] = {}
    keyed: dict[str, dict[str, str]] = {}
    for row in rows:
        base = row_key(row, id_column)
        count = seen.get(base, 0) + 1
        key = base if count == 1 else f"{base}#{count}"
        while key in keyed:
            count += 1
            key = f"{base}#{count}"
        seen[base] = count
        keyed[key] = row
    return keyed


def _cell_records(
    key: str,
    before_row: dict[str, str],
    after_row: dict[str, str],
) -> list[ChangeRecord]:
    columns = list(after_row) + [c for c in before_row if c not in after_row]
    records: list[ChangeRecord] = []
    for column in columns:
        if is_placeholder(column):
            continue
        before = before_row.get(column, "").strip()
        after = after_row.get(column, "").strip()
        if before == after:
            continue
        if not before:
            kind = ChangeKind.ADDED
        elif not after:
            kind = ChangeKind.CLEARED
        else:
            kind = ChangeKind.UPDATED
        records.append(ChangeRecord(
            row_key=key,
            column=column,
            kind=kind,
            before=before,
            after=after,
            severity=Severity.DATA,
        ))
    return records


def cap_records(records: list[ChangeRecord], max_changes: int) -> list[ChangeRecord]:
    """Truncate *records* to *max_changes*, keeping structural ones first.

    When anything is dropped a ``Truncated`` INFO record is appended
    stating how many records were omitted.
    """
    if len(records) <= max_changes:
        return records
    ordered = (
        [r for r in records if r.severity == Severity.STRUCTURAL]
        + [r for r in records if r.severity != Severity.STRUCTURAL]
    )
    kept = ordered[:max_changes]
    omitted = len(records) - len(kept)
    kept.append(ChangeRecord(
        row_key="",
        column="",
        kind=ChangeKind.TRUNCATED,
        before=str(len(records)),
        after=f"{omitted} more change(s) not shown",
        severity=Severity.INFO,
    ))
    return kept


def diff_rows(
    prev: list[dict[str, str]],
    curr: list[dict[str, str]],
    *,
    id_column: str = DEFAULT_ID_COLUMN,
    max_changes: int = DEFAULT_MAX_CHANGES_PER_TAB,
) -> list[ChangeRecord]:
    """Compute row and cell changes from *prev* to *curr*.

    Returns
    -------
    list[ChangeRecord]
        ``Row Added`` records (current order), then ``Row Deleted``
        records (previous order), then ``Added`` / ``Updated`` /
        ``Cleared`` cell records for rows present on both sides, capped
        by :func:`cap_records`.
    """
    before = keyed_rows(prev, id_column)
    after = keyed_rows(curr, id_column)

    structural: list[ChangeRecord] = []
    data: list[ChangeRecord] = []

    for key in after:
        if key not in before:
            structural.append(ChangeRecord(
                row_key=key,
                column=ROW_COLUMN,
                kind=ChangeKind.ROW_ADDED,
                before="",
                after="Row created",
                severity=Severity.STRUCTURAL,
            ))
    for key in before:
        if key not in after:
            structural.append(ChangeRecord(
                row_key=key,
                column=ROW_COLUMN,
                kind=ChangeKind.ROW_DELETED,
                before="Row existed",
                after="",
                severity=Severity.STRUCTURAL,
            ))
    for key, row in after.items():
        if key in before:
            data.extend(_cell_records(key, before[key], row))

    return cap_records(structural + data, max_changes)
