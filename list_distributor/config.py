"""Configuration helpers for the contact list distributor."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models import Agent
from .storage import DEFAULT_MAX_UPLOAD_BYTES

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


@dataclass(frozen=True)
class Settings:
    upload_dir: Path
    max_upload_bytes: Optional[int]
    parse_timeout_seconds: Optional[float]
    repository_backend: str
    repository_path: Path


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    try:
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Configuration file '{file_path}' could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def load_settings(config: Dict[str, Any]) -> Settings:
    repository = config.get("repository") or {}
    max_upload_bytes = config.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES)
    timeout = config.get("parse_timeout_seconds")
    try:
        return Settings(
            upload_dir=Path(config.get("upload_dir") or "uploads"),
            max_upload_bytes=int(max_upload_bytes) if max_upload_bytes is not None else None,
            parse_timeout_seconds=float(timeout) if timeout is not None else None,
            repository_backend=str(repository.get("backend") or "json").strip().lower(),
            repository_path=Path(repository.get("path") or "lists"),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc


def load_agents(config: Dict[str, Any]) -> List[Agent]:
    """Build :class:`Agent` objects for every configured agent, active or not."""

    agents: List[Agent] = []
    seen: set[str] = set()
    for entry in config.get("agents", []) or []:
        agent_id = str(entry.get("id") or "").strip()
        if not agent_id:
            raise ConfigurationError("Agent configuration missing required 'id' field")
        if agent_id in seen:
            raise ConfigurationError(f"Duplicate agent id '{agent_id}'")
        seen.add(agent_id)
        if not entry.get("active", True):
            LOGGER.debug("Agent %s is inactive and will not receive contacts", agent_id)
        agents.append(
            Agent(
                id=agent_id,
                name=str(entry.get("name") or ""),
                email=str(entry.get("email") or ""),
                mobile=str(entry.get("mobile") or ""),
                active=bool(entry.get("active", True)),
            )
        )
    return agents


__all__ = [
    "ConfigurationError",
    "Settings",
    "load_configuration",
    "load_settings",
    "load_agents",
]
