"""Workbook sources.

Exports
-------
HttpWorkbookSource
    Downloads a published ``.xlsx`` export with retries.
FileWorkbookSource
    Reads a local ``.xlsx`` file.
parse_workbook
    Decodes ``.xlsx`` bytes into text matrices.
"""

from .http import FileWorkbookSource, HttpWorkbookSource
from .xlsx import parse_workbook

__all__ = [
    "FileWorkbookSource",
    "HttpWorkbookSource",
    "parse_workbook",
]
