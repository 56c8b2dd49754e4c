"""Change detection: fingerprint gate, header diff, row diff, aggregation.

Exports
-------
classify_tabs
    Classify tabs as unchanged / changed / added / removed by fingerprint.
diff_headers
    Compare two ordered header lists.
diff_rows
    Stable-key row and cell diff with a per-tab cap.
diff_tab
    Header plus row diff of one tab.
aggregate
    Merge per-tab diffs into a :class:`ChangeSet`.
extract_snapshot
    Build a :class:`TabSnapshot` from a raw matrix.
"""

from .aggregate import TabDiff, aggregate, diff_tab, summarize
from .extract import extract_snapshot
from .gate import classify_tabs, fingerprint_matrix
from .headers import diff_headers
from .rows import diff_rows, keyed_rows, row_key

__all__ = [
    "TabDiff",
    "aggregate",
    "classify_tabs",
    "diff_headers",
    "diff_rows",
    "diff_tab",
    "extract_snapshot",
    "fingerprint_matrix",
    "keyed_rows",
    "row_key",
    "summarize",
]
