"""Export utilities for distributed contact lists."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, MutableMapping, Optional, Union

import pandas as pd

from ..models import Agent, IngestionResult

PathLike = Union[str, Path]

ASSIGNMENT_COLUMNS = ["agent_id", "agent_name", "position", "name", "phone", "notes"]


def export_assignments(
    result: IngestionResult,
    path: PathLike,
    *,
    agents: Optional[Iterable[Agent]] = None,
    sheet_name: str = "Assignments",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write one row per assigned contact to a CSV or Excel file."""

    dataframe = result_to_dataframe(result, agents=agents)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def result_to_dataframe(result: IngestionResult, *, agents: Optional[Iterable[Agent]] = None) -> pd.DataFrame:
    """Flatten an ingestion result into a :class:`pandas.DataFrame`, in distribution order."""

    names: Mapping[str, str] = {agent.id: agent.display_name() for agent in agents or []}
    rows: List[MutableMapping[str, object]] = []
    for distribution in result.distributions:
        for position, item in enumerate(distribution.items, start=1):
            rows.append(
                {
                    "agent_id": distribution.agent_id,
                    "agent_name": names.get(distribution.agent_id, ""),
                    "position": position,
                    "name": item.name,
                    "phone": item.phone,
                    "notes": item.notes,
                }
            )
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix == ".csv":
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix == ".xlsx":
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["ASSIGNMENT_COLUMNS", "export_assignments", "result_to_dataframe"]
