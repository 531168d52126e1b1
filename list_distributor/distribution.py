"""Even, order-preserving distribution of contacts across agents."""
from __future__ import annotations

from typing import List, Sequence

from .models import ContactRecord, Distribution


def share_sizes(total: int, agent_count: int) -> List[int]:
    """Return how many records each agent position receives.

    The first ``total % agent_count`` positions get one extra record.
    """

    if agent_count <= 0:
        raise ValueError("At least one agent is required to distribute records")
    base, remainder = divmod(total, agent_count)
    return [base + (1 if index < remainder else 0) for index in range(agent_count)]


def distribute(records: Sequence[ContactRecord], agent_ids: Sequence[str]) -> List[Distribution]:
    """Split ``records`` into contiguous slices, one per agent, in the given order."""

    distributions: List[Distribution] = []
    cursor = 0
    for agent_id, size in zip(agent_ids, share_sizes(len(records), len(agent_ids))):
        distributions.append(Distribution(agent_id=agent_id, items=tuple(records[cursor : cursor + size])))
        cursor += size
    return distributions


__all__ = ["distribute", "share_sizes"]
