"""Parsers turning uploaded CSV and spreadsheet files into contact records."""
from __future__ import annotations

import csv
import io
import logging
import time
from pathlib import Path
from typing import Any, BinaryIO, Iterator, List, Optional, Sequence, Tuple, Union

import pandas as pd

from ..errors import IngestionTimeoutError, ParseError, StreamReadError, UnsupportedFormatError
from ..models import ContactRecord
from .columns import RowPairs, row_to_contact

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]

CSV_FORMAT = "csv"
EXCEL_FORMAT = "excel"

_CSV_SUFFIXES = {".csv"}
_EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}


def detect_format(filename: PathLike) -> str:
    """Return the parser format for ``filename`` based on its extension."""

    suffix = Path(str(filename)).suffix.lower()
    if suffix in _CSV_SUFFIXES:
        return CSV_FORMAT
    if suffix in _EXCEL_ENGINES:
        return EXCEL_FORMAT
    raise UnsupportedFormatError(f"Unsupported file extension: {suffix or '(none)'}")


def parse_contacts(
    stream: BinaryIO,
    file_format: str,
    *,
    filename: Optional[PathLike] = None,
    deadline: Optional[float] = None,
) -> List[ContactRecord]:
    """Parse an uploaded file into contacts, dropping rows without a name or phone.

    Parameters
    ----------
    stream:
        Binary file object positioned at the start of the upload.
    file_format:
        ``"csv"`` or ``"excel"``, as returned by :func:`detect_format`.
    filename:
        Original file name; selects the spreadsheet engine for ``"excel"``.
    deadline:
        Optional :func:`time.monotonic` value after which CSV parsing is
        abandoned with :class:`IngestionTimeoutError`.
    """

    if file_format == CSV_FORMAT:
        return parse_csv(stream, deadline=deadline)
    if file_format == EXCEL_FORMAT:
        engine = _EXCEL_ENGINES.get(Path(str(filename)).suffix.lower()) if filename else None
        return parse_excel(stream, engine=engine)
    raise UnsupportedFormatError(f"Unsupported file format: {file_format}")


def parse_csv(stream: BinaryIO, *, deadline: Optional[float] = None) -> List[ContactRecord]:
    """Stream a CSV upload row by row; the first row supplies the headers."""

    contacts: List[ContactRecord] = []
    skipped = 0
    text = io.TextIOWrapper(stream, encoding="utf-8-sig", errors="replace", newline="")
    try:
        for row in _iter_csv_rows(text):
            if deadline is not None and time.monotonic() > deadline:
                raise IngestionTimeoutError()
            contact = row_to_contact(row)
            if contact is None:
                skipped += 1
                continue
            contacts.append(contact)
    finally:
        # Leave the caller's stream open; the transient store owns it.
        text.detach()

    LOGGER.debug("Parsed %s contacts from CSV (%s rows skipped)", len(contacts), skipped)
    return contacts


def _iter_csv_rows(text: io.TextIOBase) -> Iterator[RowPairs]:
    try:
        reader = csv.reader(text)
        header = next(reader, None)
        if header is None:
            return
        for values in reader:
            if not any(value.strip() for value in values):
                continue
            yield list(zip(header, values))
    except (OSError, csv.Error) as exc:
        raise StreamReadError(f"Failed to read CSV upload: {exc}") from exc


def parse_excel(stream: BinaryIO, *, engine: Optional[str] = None) -> List[ContactRecord]:
    """Load the first sheet of a workbook and normalise each row."""

    dataframe = _read_first_sheet(stream, engine=engine)
    contacts: List[ContactRecord] = []
    for row in _dataframe_rows(dataframe):
        contact = row_to_contact(row)
        if contact is not None:
            contacts.append(contact)

    LOGGER.debug("Parsed %s contacts from %s spreadsheet rows", len(contacts), len(dataframe.index))
    return contacts


def _read_first_sheet(stream: BinaryIO, *, engine: Optional[str]) -> pd.DataFrame:
    try:
        return pd.read_excel(stream, sheet_name=0, engine=engine, dtype=object)
    except Exception as exc:  # pandas engines raise mixed error types for undecodable input
        raise ParseError(f"Unable to read spreadsheet: {exc}") from exc


def _dataframe_rows(dataframe: pd.DataFrame) -> Iterator[Sequence[Tuple[str, Any]]]:
    columns = [str(column) for column in dataframe.columns]
    for values in dataframe.itertuples(index=False, name=None):
        yield list(zip(columns, values))


__all__ = [
    "CSV_FORMAT",
    "EXCEL_FORMAT",
    "detect_format",
    "parse_contacts",
    "parse_csv",
    "parse_excel",
]
