"""Exceptions raised while ingesting and distributing contact lists."""
from __future__ import annotations

from typing import Optional


class IngestionError(RuntimeError):
    """Base class for every rejected ingestion."""

    status_code = 400
    default_message = "Ingestion failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class MissingFileError(IngestionError):
    default_message = "Please upload a file"


class UnsupportedFormatError(IngestionError, ValueError):
    default_message = "Only CSV, XLSX, and XLS files are allowed"


class NoActiveAgentsError(IngestionError):
    default_message = "No active agents found. Please add agents first."


class EmptyDatasetError(IngestionError):
    default_message = (
        "No valid data found in file. Please ensure the file has FirstName, Phone, and Notes columns."
    )


class StreamReadError(IngestionError):
    """Raised when the uploaded stream cannot be read to the end."""

    default_message = "Failed to read the uploaded file"


class ParseError(IngestionError):
    """Raised when a spreadsheet cannot be decoded."""

    default_message = "The uploaded spreadsheet could not be parsed"


class PayloadTooLargeError(IngestionError):
    status_code = 413
    default_message = "The uploaded file is too large"


class IngestionTimeoutError(IngestionError):
    status_code = 408
    default_message = "Processing the uploaded file took too long"


class PersistenceError(IngestionError):
    status_code = 500
    default_message = "Failed to store the contact list"


class ResultNotFoundError(IngestionError, LookupError):
    status_code = 404
    default_message = "List not found"


__all__ = [
    "IngestionError",
    "MissingFileError",
    "UnsupportedFormatError",
    "NoActiveAgentsError",
    "EmptyDatasetError",
    "StreamReadError",
    "ParseError",
    "PayloadTooLargeError",
    "IngestionTimeoutError",
    "PersistenceError",
    "ResultNotFoundError",
]
