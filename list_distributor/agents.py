"""Read-only views over the agents eligible to receive contacts."""
from __future__ import annotations

from typing import Iterable, List, Protocol

from .models import Agent


class AgentDirectory(Protocol):
    def list_active_agents(self) -> List[Agent]:  # pragma: no cover - runtime protocol
        """Return active agents in a stable order."""


class StaticAgentDirectory:
    """Agent directory backed by a fixed list, kept in insertion order."""

    def __init__(self, agents: Iterable[Agent]) -> None:
        self._agents = tuple(agents)

    @property
    def agents(self) -> List[Agent]:
        return list(self._agents)

    def list_active_agents(self) -> List[Agent]:
        return [agent for agent in self._agents if agent.active]


__all__ = ["AgentDirectory", "StaticAgentDirectory"]
