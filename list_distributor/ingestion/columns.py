"""Header classification and row normalisation for uploaded contact lists."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ..models import ContactRecord

RowPairs = Sequence[Tuple[str, Any]]

NAME = "name"
PHONE = "phone"
NOTES = "notes"

# Checked in order; the first field whose synonyms appear in the header wins.
_FIELD_SYNONYMS: Sequence[Tuple[str, Sequence[str]]] = (
    (NAME, ("firstname", "first_name", "first name")),
    (PHONE, ("phone", "mobile", "number")),
    (NOTES, ("notes", "note", "comments")),
)


def classify_header(header: Any) -> Optional[str]:
    """Return the canonical field a header maps to, or ``None`` to ignore it."""

    if header is None:
        return None
    header_lc = str(header).strip().lower()
    if not header_lc:
        return None
    for field_name, synonyms in _FIELD_SYNONYMS:
        if any(synonym in header_lc for synonym in synonyms):
            return field_name
    return None


def clean_cell(value: Any) -> str:
    """Coerce a raw cell value to a trimmed string; missing cells become ``""``."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def normalise_row(row: RowPairs) -> Dict[str, str]:
    """Map a row of ``(header, value)`` pairs onto the canonical fields.

    When several headers classify to the same field, the leftmost one holding
    a non-empty value is kept.
    """

    fields: Dict[str, str] = {}
    for header, value in row:
        field_name = classify_header(header)
        if field_name is None or has_text(fields.get(field_name)):
            continue
        fields[field_name] = clean_cell(value)
    return fields


def row_to_contact(row: RowPairs) -> Optional[ContactRecord]:
    """Build a :class:`ContactRecord` or return ``None`` when name or phone is blank."""

    fields = normalise_row(row)
    name = fields.get(NAME, "")
    phone = fields.get(PHONE, "")
    if not has_text(name) or not has_text(phone):
        return None
    return ContactRecord(name=name, phone=phone, notes=fields.get(NOTES, ""))


def mapping_to_pairs(row: Mapping[Any, Any]) -> RowPairs:
    return [(str(key), value) for key, value in row.items()]


def rows_to_contacts(rows: Iterable[RowPairs]) -> list[ContactRecord]:
    contacts: list[ContactRecord] = []
    for row in rows:
        contact = row_to_contact(row)
        if contact is not None:
            contacts.append(contact)
    return contacts


__all__ = [
    "NAME",
    "PHONE",
    "NOTES",
    "classify_header",
    "clean_cell",
    "normalise_row",
    "row_to_contact",
    "rows_to_contacts",
    "mapping_to_pairs",
]
