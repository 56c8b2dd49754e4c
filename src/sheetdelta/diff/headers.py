"""Header row diff."""

from __future__ import annotations

from sheetdelta.models import ChangeKind, ChangeRecord, Severity

HEADER_ROW_KEY = "HEADER"
NAME_SEPARATOR = ", "
SEQUENCE_SEPARATOR = " | "


def _clean(headers: list[str]) -> list[str]:
    return [h.strip() for h in headers if h and h.strip()]


def diff_headers(prev: list[str], curr: list[str]) -> list[ChangeRecord]:
    """Compare two ordered header lists.

    Blank entries are ignored on both sides.  Added and removed names are
    each reported as one aggregated record listing every name.  An order
    change is only reported when both sides hold the same set of names,
    so a rename never doubles as a reorder.
    """
    before = _clean(prev)
    after = _clean(curr)
    before_set = set(before)
    after_set = set(after)

    added = list(dict.fromkeys(h for h in after if h not in before_set))
    removed = list(dict.fromkeys(h for h in before if h not in after_set))

    records: list[ChangeRecord] = []
    if added:
        records.append(ChangeRecord(
            row_key=HEADER_ROW_KEY,
            column=NAME_SEPARATOR.join(added),
            kind=ChangeKind.HEADER_ADDED,
            before="",
            after=NAME_SEPARATOR.join(added),
            severity=Severity.STRUCTURAL,
        ))
    if removed:
        records.append(ChangeRecord(
            row_key=HEADER_ROW_KEY,
            column=NAME_SEPARATOR.join(removed),
            kind=ChangeKind.HEADER_REMOVED,
            before=NAME_SEPARATOR.join(removed),
            after="",
            severity=Severity.STRUCTURAL,
        ))
    if before_set == after_set and before != after:
        records.append(ChangeRecord(
            row_key=HEADER_ROW_KEY,
            column="",
            kind=ChangeKind.HEADER_ORDER_CHANGED,
            before=SEQUENCE_SEPARATOR.join(before),
            after=SEQUENCE_SEPARATOR.join(after),
            severity=Severity.STRUCTURAL,
        ))
    return records
