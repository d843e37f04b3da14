"""Column layouts of the roster spreadsheet.

Two layouts exist in the wild: the current one keyed by serial number with
eight demographic columns, and an older one with five columns whose second
column is an opaque member code. A deployment picks one with
``ROSTER_SCHEMA``; the header row, when present, can rebind the indices.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .models import User

HEADER_ALIASES: Dict[str, str] = {
    "연번": "serial",
    "번호": "serial",
    "no": "serial",
    "no.": "serial",
    "serial": "serial",
    "id": "identifier",
    "아이디": "identifier",
    "고유번호": "identifier",
    "이름": "name",
    "성함": "name",
    "성명": "name",
    "name": "name",
    "생년월일": "birthdate",
    "생일": "birthdate",
    "가입일": "birthdate",
    "birthdate": "birthdate",
    "성별": "gender",
    "gender": "gender",
    "관할동": "district",
    "행정동": "district",
    "district": "district",
    "주소": "address",
    "address": "address",
    "전화": "phone",
    "전화번호": "phone",
    "연락처": "phone",
    "휴대폰": "phone",
    "phone": "phone",
    "보호유형": "category",
    "유형": "category",
    "구분": "category",
    "category": "category",
}

# Labels that only ever appear in a header row's name or serial column.
HEADER_LABELS = frozenset(
    label for label, target in HEADER_ALIASES.items() if target in {"name", "serial"}
)

_RANGE_COLUMN = re.compile(r"^([A-Za-z]+)")


@dataclass(frozen=True, slots=True)
class RosterSchema:
    """Maps semantic fields to column indices of one source layout."""

    name: str
    columns: Mapping[str, int] = field(default_factory=dict)
    default_range: str = "Sheet1!A:H"

    def cell(self, fields: Sequence[str], name: str) -> str:
        index = self.columns.get(name)
        if index is None or index < 0 or index >= len(fields):
            return ""
        return fields[index].strip()

    def shifted(self, offset: int) -> "RosterSchema":
        """Return the layout as seen by a read that starts ``offset`` columns in."""

        if not offset:
            return self
        columns = {key: index - offset for key, index in self.columns.items() if index >= offset}
        return RosterSchema(name=self.name, columns=columns, default_range=self.default_range)

    def bind_header(self, fields: Sequence[str]) -> Optional["RosterSchema"]:
        """Rebind column indices from a header row, or None if it is not one."""

        columns: Dict[str, int] = {}
        for index, label in enumerate(fields):
            target = HEADER_ALIASES.get(label.strip().lower())
            if target and target not in columns:
                columns[target] = index
        if "name" not in columns or "serial" not in columns:
            return None
        return RosterSchema(name=self.name, columns=columns, default_range=self.default_range)

    def build_user(self, fields: Sequence[str]) -> User:
        serial = int(self.cell(fields, "serial"))
        return User(
            serial=serial,
            name=self.cell(fields, "name"),
            birthdate=self.cell(fields, "birthdate"),
            phone=self.cell(fields, "phone"),
            identifier=self.cell(fields, "identifier") or str(serial),
            gender=self.cell(fields, "gender"),
            district=self.cell(fields, "district"),
            address=self.cell(fields, "address"),
            category=self.cell(fields, "category"),
        )

    def to_row(self, user: User) -> List[str]:
        """Render a member as a row in this layout's column order."""

        width = max(self.columns.values()) + 1 if self.columns else 0
        row = [""] * width
        for key, index in self.columns.items():
            value = getattr(user, key)
            row[index] = str(value)
        return row


SERIAL_SCHEMA = RosterSchema(
    name="serial",
    columns={
        "serial": 0,
        "name": 1,
        "birthdate": 2,
        "gender": 3,
        "district": 4,
        "address": 5,
        "phone": 6,
        "category": 7,
    },
    default_range="Sheet1!A:H",
)

LEGACY_SCHEMA = RosterSchema(
    name="legacy",
    columns={
        "serial": 0,
        "identifier": 1,
        "name": 2,
        "phone": 3,
        "birthdate": 4,
    },
    default_range="Sheet1!A:E",
)

SCHEMAS: Dict[str, RosterSchema] = {
    SERIAL_SCHEMA.name: SERIAL_SCHEMA,
    LEGACY_SCHEMA.name: LEGACY_SCHEMA,
}


def get_schema(name: str) -> RosterSchema:
    try:
        return SCHEMAS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown roster schema {name!r}; expected one of {sorted(SCHEMAS)}") from None


def column_offset(cell_range: str) -> int:
    """Zero-based index of the first column of an A1 range like ``Sheet1!B:I``."""

    _, _, cells = cell_range.rpartition("!")
    match = _RANGE_COLUMN.match(cells.strip())
    if not match:
        return 0
    index = 0
    for letter in match.group(1).upper():
        index = index * 26 + (ord(letter) - ord("A") + 1)
    return index - 1


__all__ = [
    "HEADER_LABELS",
    "RosterSchema",
    "SERIAL_SCHEMA",
    "LEGACY_SCHEMA",
    "SCHEMAS",
    "get_schema",
    "column_offset",
]
