"""Parsing, column normalisation, and export of uploaded contact lists."""

from .columns import classify_header, normalise_row, row_to_contact
from .exporters import export_assignments, result_to_dataframe
from .loaders import detect_format, parse_contacts, parse_csv, parse_excel

__all__ = [
    "classify_header",
    "normalise_row",
    "row_to_contact",
    "detect_format",
    "parse_contacts",
    "parse_csv",
    "parse_excel",
    "export_assignments",
    "result_to_dataframe",
]
