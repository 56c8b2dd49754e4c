"""Attachment exporters."""

from .csv_exporter import CsvExporter, attachment_filename, matrix_to_csv

__all__ = [
    "CsvExporter",
    "attachment_filename",
    "matrix_to_csv",
]
