"""Data models shared by the parser, distribution engine, and persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple


# --- Contact Models ---

@dataclass(frozen=True, slots=True)
class ContactRecord:
    """A single contact extracted from one spreadsheet row."""

    name: str
    phone: str
    notes: str = ""

    def as_dict(self) -> Dict[str, str]:
        return {"name": self.name, "phone": self.phone, "notes": self.notes}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContactRecord":
        return cls(
            name=str(data["name"]),
            phone=str(data["phone"]),
            notes=str(data.get("notes") or ""),
        )


# --- Agent Models ---

@dataclass(frozen=True, slots=True)
class Agent:
    """Sales agent eligible to receive contacts while ``active`` is set."""

    id: str
    name: str = ""
    email: str = ""
    mobile: str = ""
    active: bool = True

    def display_name(self) -> str:
        """Return a readable name for logs and exports."""
        return self.name or self.email or self.id

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "mobile": self.mobile,
            "active": self.active,
        }


# --- Distribution Models ---

@dataclass(frozen=True, slots=True)
class Distribution:
    """The contiguous slice of contacts assigned to one agent."""

    agent_id: str
    items: Tuple[ContactRecord, ...] = ()

    @property
    def assigned_count(self) -> int:
        return len(self.items)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "items": [item.as_dict() for item in self.items],
            "assigned_count": self.assigned_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Distribution":
        return cls(
            agent_id=str(data["agent_id"]),
            items=tuple(ContactRecord.from_dict(item) for item in data.get("items", [])),
        )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class IngestionResult:
    """Persisted outcome of one upload: every contact and the agent it went to."""

    id: str
    source_file_name: str
    total_items: int
    distributions: Tuple[Distribution, ...] = ()
    uploaded_by: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source_file_name": self.source_file_name,
            "total_items": self.total_items,
            "uploaded_by": self.uploaded_by,
            "created_at": self.created_at.isoformat(),
            "distributions": [distribution.as_dict() for distribution in self.distributions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IngestionResult":
        created_at = data.get("created_at")
        return cls(
            id=str(data["id"]),
            source_file_name=str(data["source_file_name"]),
            total_items=int(data["total_items"]),
            distributions=tuple(Distribution.from_dict(item) for item in data.get("distributions", [])),
            uploaded_by=data.get("uploaded_by"),
            created_at=datetime.fromisoformat(created_at) if created_at else _utcnow(),
        )


__all__ = [
    "ContactRecord",
    "Agent",
    "Distribution",
    "IngestionResult",
]
