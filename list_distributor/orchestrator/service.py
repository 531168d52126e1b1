"""Ingestion orchestrator that parses an upload and distributes it across agents."""
from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..agents import AgentDirectory
from ..distribution import distribute
from ..errors import (
    EmptyDatasetError,
    IngestionError,
    MissingFileError,
    NoActiveAgentsError,
    PersistenceError,
)
from ..ingestion.loaders import detect_format, parse_contacts
from ..models import Agent, ContactRecord, Distribution, IngestionResult
from ..repository import ResultRepository
from ..storage import TransientFile, TransientStore, Upload

LOGGER = logging.getLogger(__name__)


class IngestionService:
    """Runs one upload through parsing, distribution, and persistence.

    The service keeps no per-request state, so a single instance can serve
    concurrent ingestions.
    """

    def __init__(
        self,
        agents: AgentDirectory,
        repository: ResultRepository,
        transient_store: TransientStore,
        *,
        distribute_function: Callable[[Sequence[ContactRecord], Sequence[str]], List[Distribution]] = distribute,
        parse_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._agents = agents
        self._repository = repository
        self._transient_store = transient_store
        self._distribute = distribute_function
        self._parse_timeout_seconds = parse_timeout_seconds

    @property
    def repository(self) -> ResultRepository:
        return self._repository

    def ingest(
        self,
        upload: Optional[Upload],
        original_filename: Optional[str],
        uploaded_by: Optional[str] = None,
    ) -> IngestionResult:
        """Store, parse, and distribute an upload, returning the persisted result."""

        if upload is None or not (original_filename or "").strip():
            raise MissingFileError()

        try:
            handle = self._transient_store.write(upload, filename=original_filename)
        except IngestionError as exc:
            LOGGER.warning("Rejected %s: %s", original_filename, exc)
            raise
        LOGGER.info("Received %s (%s bytes) from %s", original_filename, handle.size, uploaded_by)
        try:
            return self._process(handle, original_filename, uploaded_by)
        except IngestionError as exc:
            LOGGER.warning("Rejected %s: %s", original_filename, exc)
            raise
        except Exception:
            LOGGER.exception("Unexpected failure while ingesting %s", original_filename)
            raise
        finally:
            self._cleanup(handle)

    def list_results(self) -> List[IngestionResult]:
        return self._repository.list_all()

    def get_result(self, result_id: str) -> IngestionResult:
        return self._repository.get(result_id)

    def _process(
        self,
        handle: TransientFile,
        original_filename: str,
        uploaded_by: Optional[str],
    ) -> IngestionResult:
        agents = self._active_agents()
        records = self._parse(handle, original_filename)

        distributions = self._distribute(records, [agent.id for agent in agents])
        result = IngestionResult(
            id=uuid.uuid4().hex,
            source_file_name=original_filename,
            total_items=len(records),
            distributions=tuple(distributions),
            uploaded_by=uploaded_by,
        )

        try:
            self._repository.save(result)
        except IngestionError:
            raise
        except Exception as exc:
            raise PersistenceError(f"Failed to store the contact list: {exc}") from exc

        LOGGER.info(
            "Distributed %s contacts from %s across %s agents (list %s)",
            result.total_items,
            original_filename,
            len(agents),
            result.id,
        )
        return result

    def _active_agents(self) -> List[Agent]:
        agents = [agent for agent in self._agents.list_active_agents() if agent.active]
        if not agents:
            raise NoActiveAgentsError()
        return agents

    def _parse(self, handle: TransientFile, original_filename: str) -> List[ContactRecord]:
        file_format = detect_format(original_filename)
        deadline = None
        if self._parse_timeout_seconds is not None:
            deadline = time.monotonic() + self._parse_timeout_seconds

        with self._transient_store.open(handle) as stream:
            records = parse_contacts(stream, file_format, filename=original_filename, deadline=deadline)

        if not records:
            raise EmptyDatasetError()
        return records

    def _cleanup(self, handle: TransientFile) -> None:
        try:
            if self._transient_store.exists(handle):
                self._transient_store.delete(handle)
                LOGGER.debug("Removed transient upload %s", handle.key)
        except Exception:
            LOGGER.exception("Failed to remove transient upload %s", handle.key)


def success_response(result: IngestionResult, *, status: int = 201) -> Dict[str, Any]:
    return {"success": True, "status": status, "data": result.as_dict()}


def error_response(exc: BaseException) -> Dict[str, Any]:
    """Map an exception onto the response payload returned to API callers."""

    if isinstance(exc, IngestionError):
        return {"success": False, "status": exc.status_code, "message": exc.message}
    return {"success": False, "status": 500, "message": "Server Error"}


__all__ = ["IngestionService", "success_response", "error_response"]
