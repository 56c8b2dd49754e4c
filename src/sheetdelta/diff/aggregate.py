"""Merge per-tab diffs into one change set."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from sheetdelta.models import ChangeRecord, ChangeSet, Severity, TabSnapshot

from .headers import diff_headers
from .rows import diff_rows


@dataclass
class TabDiff:
    """Header and row records computed for one tab."""

    tab: str
    header_records: list[ChangeRecord] = field(default_factory=list)
    row_records: list[ChangeRecord] = field(default_factory=list)

    @property
    def records(self) -> list[ChangeRecord]:
        return self.header_records + self.row_records


def diff_tab(
    tab: str,
    prev: TabSnapshot,
    curr: TabSnapshot,
    *,
    id_column: str,
    max_changes: int,
) -> TabDiff:
    """Diff one tab's committed snapshot against its current extraction."""
    return TabDiff(
        tab=tab,
        header_records=diff_headers(prev.headers, curr.headers),
        row_records=diff_rows(
            prev.rows, curr.rows, id_column=id_column, max_changes=max_changes,
        ),
    )


def aggregate(
    tab_diffs: list[TabDiff],
    added_tabs: list[str],
    removed_tabs: list[str],
) -> ChangeSet:
    """Build the run's :class:`ChangeSet`.

    Each tab contributes its header records followed by its row records,
    and only when there is at least one.  Tab additions and removals are
    carried separately: they are reported even when no record applies.
    """
    change_set = ChangeSet(added_tabs=list(added_tabs), removed_tabs=list(removed_tabs))
    for tab_diff in tab_diffs:
        records = tab_diff.records
        if records:
            change_set.changes_by_tab[tab_diff.tab] = records
    return change_set


def summarize(change_set: ChangeSet) -> dict[str, int]:
    """Count records per severity plus tab additions and removals."""
    counts: Counter[str] = Counter()
    for records in change_set.changes_by_tab.values():
        counts.update(r.severity.value for r in records)
    return {
        "tabs_added": len(change_set.added_tabs),
        "tabs_removed": len(change_set.removed_tabs),
        "tabs_changed": len(change_set.changes_by_tab),
        "structural": counts[Severity.STRUCTURAL.value],
        "data": counts[Severity.DATA.value],
        "info": counts[Severity.INFO.value],
    }
