"""Whole-tab fingerprint gate.

Comparing one SHA-256 per tab against the previous run's value lets a run
skip every untouched tab without paying for a row diff.  The fingerprint
covers the raw matrix, header row included, exactly as the source
returned it, so any cell, row or column change alters it.
"""

from __future__ import annotations

from collections.abc import Mapping

from sheetdelta.models import GateResult, TabStatus, WorkbookData
from sheetdelta.utils.hashing import hash_json


def fingerprint_matrix(matrix: list[list[str]]) -> str:
    """Return the SHA-256 fingerprint of a raw tab matrix."""
    return hash_json(matrix)


def classify_tabs(
    workbook: WorkbookData,
    previous: Mapping[str, str],
) -> GateResult:
    """Classify every current and previously known tab.

    Parameters
    ----------
    workbook:
        Freshly fetched workbook.
    previous:
        Tab fingerprints from the last committed state (empty on the first
        run).

    Returns
    -------
    GateResult
        ``unchanged`` / ``changed`` / ``added`` for each current tab in
        document order, then ``removed`` for each previously known tab
        that is gone.  ``fingerprints`` holds the current tabs only.
    """
    result = GateResult()

    for tab in workbook.tab_names:
        fingerprint = fingerprint_matrix(workbook.matrix(tab))
        result.fingerprints[tab] = fingerprint
        prior = previous.get(tab)
        if prior is None:
            result.statuses[tab] = TabStatus.ADDED
        elif prior == fingerprint:
            result.statuses[tab] = TabStatus.UNCHANGED
        else:
            result.statuses[tab] = TabStatus.CHANGED

    for tab in previous:
        if tab not in result.fingerprints:
            result.statuses[tab] = TabStatus.REMOVED

    return result
