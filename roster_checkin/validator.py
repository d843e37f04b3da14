"""Gate that separates genuine member rows from blanks, headers and junk."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from .schema import HEADER_LABELS, SERIAL_SCHEMA, RosterSchema

MIN_NAME_LENGTH = 2
MIN_BIRTHDATE_LENGTH = 4
MIN_PHONE_LENGTH = 7


@dataclass(slots=True)
class RowVerdict:
    """Structured representation of a row check."""

    accepted: bool
    reasons: List[str]


def parse_serial(value: str) -> int | None:
    value = value.strip()
    # ASCII digits only
    if not (value.isascii() and value.isdigit()):
        return None
    serial = int(value)
    return serial if serial > 0 else None


def inspect_row(fields: Sequence[str], schema: RosterSchema = SERIAL_SCHEMA) -> RowVerdict:
    """Return which of the row predicates failed, if any."""

    reasons: List[str] = []

    if parse_serial(schema.cell(fields, "serial")) is None:
        reasons.append("serial")

    name = schema.cell(fields, "name")
    if len(name) < MIN_NAME_LENGTH:
        reasons.append("name")
    if name.lower() in HEADER_LABELS:
        reasons.append("header")

    if len(schema.cell(fields, "birthdate")) < MIN_BIRTHDATE_LENGTH:
        reasons.append("birthdate")
    if len(schema.cell(fields, "phone")) < MIN_PHONE_LENGTH:
        reasons.append("phone")

    return RowVerdict(accepted=not reasons, reasons=reasons)


def is_genuine_row(fields: Sequence[str], schema: RosterSchema = SERIAL_SCHEMA) -> bool:
    return inspect_row(fields, schema).accepted


__all__ = ["RowVerdict", "inspect_row", "is_genuine_row", "parse_serial"]
