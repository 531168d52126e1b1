"""Ingest uploaded contact lists and distribute them evenly across active agents."""

from . import models  # noqa: F401
from .distribution import distribute
from .errors import (
    EmptyDatasetError,
    IngestionError,
    IngestionTimeoutError,
    MissingFileError,
    NoActiveAgentsError,
    ParseError,
    PayloadTooLargeError,
    PersistenceError,
    ResultNotFoundError,
    StreamReadError,
    UnsupportedFormatError,
)
from .models import Agent, ContactRecord, Distribution, IngestionResult
from .orchestrator import IngestionService

__all__ = [
    "Agent",
    "ContactRecord",
    "Distribution",
    "IngestionResult",
    "IngestionService",
    "distribute",
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
    "ingestion",
    "orchestrator",
]
