"""Persistence backends for ingestion results."""
from __future__ import annotations

import json
import logging
import re
import threading
from pathlib import Path
from typing import Dict, List, Protocol, Union

from .errors import PersistenceError, ResultNotFoundError
from .models import IngestionResult

LOGGER = logging.getLogger(__name__)

_VALID_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class ResultRepository(Protocol):
    """Storage contract for ingestion results."""

    def save(self, result: IngestionResult) -> str:  # pragma: no cover - runtime protocol
        """Persist ``result`` and return its identifier."""

    def list_all(self) -> List[IngestionResult]:  # pragma: no cover - runtime protocol
        """Return every stored result, newest first."""

    def get(self, result_id: str) -> IngestionResult:  # pragma: no cover - runtime protocol
        """Return a stored result or raise :class:`ResultNotFoundError`."""


def _newest_first(results: List[IngestionResult]) -> List[IngestionResult]:
    return sorted(results, key=lambda result: result.created_at, reverse=True)


class InMemoryResultRepository:
    """Keeps results in a dictionary for the lifetime of the process."""

    def __init__(self) -> None:
        self._results: Dict[str, IngestionResult] = {}
        self._lock = threading.Lock()

    def save(self, result: IngestionResult) -> str:
        with self._lock:
            self._results[result.id] = result
        return result.id

    def list_all(self) -> List[IngestionResult]:
        with self._lock:
            results = list(self._results.values())
        return _newest_first(results)

    def get(self, result_id: str) -> IngestionResult:
        with self._lock:
            try:
                return self._results[result_id]
            except KeyError:
                raise ResultNotFoundError() from None


class JsonResultRepository:
    """Stores one JSON document per result inside ``root``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path(self, result_id: str) -> Path:
        return self.root / f"{result_id}.json"

    def save(self, result: IngestionResult) -> str:
        if not _VALID_ID.match(result.id):
            raise PersistenceError(f"Invalid result id '{result.id}'")
        destination = self._path(result.id)
        staging = destination.with_suffix(".json.tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            staging.write_text(json.dumps(result.as_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
            staging.replace(destination)
        except OSError as exc:
            staging.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to write {destination}: {exc}") from exc
        LOGGER.debug("Saved ingestion result %s to %s", result.id, destination)
        return result.id

    def list_all(self) -> List[IngestionResult]:
        if not self.root.exists():
            return []
        return _newest_first([self._load(path) for path in self.root.glob("*.json")])

    def get(self, result_id: str) -> IngestionResult:
        if not _VALID_ID.match(result_id or ""):
            raise ResultNotFoundError()
        path = self._path(result_id)
        if not path.exists():
            raise ResultNotFoundError()
        return self._load(path)

    def _load(self, path: Path) -> IngestionResult:
        try:
            return IngestionResult.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise PersistenceError(f"Failed to read {path}: {exc}") from exc


__all__ = ["ResultRepository", "InMemoryResultRepository", "JsonResultRepository"]
