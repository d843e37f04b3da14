"""Tokenizer for one line of the spreadsheet's CSV export."""

from __future__ import annotations

import re
from typing import List

CONTROL_CHARS = re.compile(r"[\r\n\t]")


def clean_cell(value: object) -> str:
    """Strip control characters and surrounding whitespace from one cell."""

    return CONTROL_CHARS.sub("", str(value)).strip()


def parse_line(raw_line: str) -> List[str]:
    """Split a CSV line on unquoted commas.

    Quotes toggle quoted mode and are dropped. An unbalanced quote keeps the
    rest of the line in one field rather than failing.
    """

    line = CONTROL_CHARS.sub("", raw_line)
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


__all__ = ["clean_cell", "parse_line"]
