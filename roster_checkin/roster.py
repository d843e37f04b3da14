"""Turns raw spreadsheet rows into an ordered, deduplicated roster."""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .models import User
from .parser import clean_cell, parse_line
from .schema import RosterSchema
from .validator import inspect_row

logger = logging.getLogger(__name__)


def dedupe_and_order(rows: Iterable[User]) -> List[User]:
    """Drop repeated serials, first occurrence wins, then sort newest first."""

    seen: set[int] = set()
    unique: List[User] = []
    for user in rows:
        if user.serial in seen:
            continue
        seen.add(user.serial)
        unique.append(user)
    return sorted(unique, key=lambda user: user.serial, reverse=True)


def ingest_rows(rows: Iterable[Sequence[str]], schema: RosterSchema) -> List[User]:
    """Validate tokenized rows and return the roster they describe.

    Until the first member row is accepted, a row made of recognized column
    labels rebinds the schema to the sheet's actual column order.
    """

    users: List[User] = []
    rejected = 0
    for line_no, fields in enumerate(rows, start=1):
        if not users:
            bound = schema.bind_header(fields)
            if bound is not None:
                schema = bound
                continue
        verdict = inspect_row(fields, schema)
        if not verdict.accepted:
            rejected += 1
            logger.debug("Skipping row %s: %s", line_no, ", ".join(verdict.reasons))
            continue
        users.append(schema.build_user(fields))

    roster = dedupe_and_order(users)
    logger.debug(
        "Ingested %s members (%s rows skipped, %s duplicates dropped)",
        len(roster),
        rejected,
        len(users) - len(roster),
    )
    return roster


def ingest_lines(lines: Iterable[str], schema: RosterSchema) -> List[User]:
    return ingest_rows((parse_line(line) for line in lines), schema)


def ingest_values(values: Iterable[Sequence[object]], schema: RosterSchema) -> List[User]:
    """Ingest the rectangular grid returned by the values API."""

    return ingest_rows(([clean_cell(cell) for cell in row] for row in values), schema)


__all__ = ["dedupe_and_order", "ingest_rows", "ingest_lines", "ingest_values"]
