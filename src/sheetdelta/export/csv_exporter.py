"""CSV export of tab matrices for notification attachments."""

from __future__ import annotations

import csv
import io
import os
import re

from sheetdelta.models import Attachment
from sheetdelta.utils.atomic import atomic_write_text
from sheetdelta.utils.hashing import tab_filename

_UNSAFE_RE = re.compile(r"[^\w.-]+")


def attachment_filename(tab: str) -> str:
    """Name shown to the recipient for the export of *tab*.

    >>> attachment_filename("Q3 / Sales")
    'Q3_Sales.csv'
    """
    stem = _UNSAFE_RE.sub("_", tab).strip("_.") or "tab"
    return f"{stem}.csv"


def matrix_to_csv(matrix: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerows(matrix)
    return buffer.getvalue()


class CsvExporter:
    """Write a tab's raw matrix as CSV under *export_dir*.

    Files are named by :func:`~sheetdelta.utils.tab_filename`, so every
    tab maps to exactly one file of bounded length and a later export
    replaces the earlier one.
    """

    def __init__(self, export_dir: str) -> None:
        self._dir = export_dir

    def path_for(self, tab: str) -> str:
        return os.path.join(self._dir, tab_filename(tab, ".csv"))

    def export(self, tab: str, matrix: list[list[str]]) -> Attachment:
        path = self.path_for(tab)
        atomic_write_text(path, matrix_to_csv(matrix))
        return Attachment(filename=attachment_filename(tab), path=path)
