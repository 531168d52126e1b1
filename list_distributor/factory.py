"""Factory helpers for constructing the ingestion service from configuration."""
from __future__ import annotations

from typing import Any, Dict

from .agents import StaticAgentDirectory
from .config import ConfigurationError, Settings, load_agents, load_settings
from .orchestrator import IngestionService
from .repository import InMemoryResultRepository, JsonResultRepository, ResultRepository
from .storage import LocalTransientStore


def build_repository(settings: Settings) -> ResultRepository:
    if settings.repository_backend == "json":
        return JsonResultRepository(settings.repository_path)
    if settings.repository_backend == "memory":
        return InMemoryResultRepository()
    raise ConfigurationError(f"Unknown repository backend '{settings.repository_backend}'")


def build_service(config: Dict[str, Any]) -> IngestionService:
    """Wire the agent directory, transient store, and repository described by ``config``."""

    settings = load_settings(config)
    return IngestionService(
        StaticAgentDirectory(load_agents(config)),
        build_repository(settings),
        LocalTransientStore(settings.upload_dir, max_bytes=settings.max_upload_bytes),
        parse_timeout_seconds=settings.parse_timeout_seconds,
    )
