"""Resolve a scanned or typed token to a roster member."""

from __future__ import annotations

import re
from typing import Callable, List, Optional, Sequence

from .models import User

MatchRule = Callable[[str, User], bool]

_NON_DIGITS = re.compile(r"[^0-9]")

# Tried in order; the first rule with any hit decides.
MATCH_RULES: Sequence[MatchRule] = (
    lambda token, user: user.identifier == token,
    lambda token, user: user.identifier.casefold() == token.casefold(),
    lambda token, user: str(user.serial) == token,
    lambda token, user: token in user.phone,
)


def match(token: str, roster: Sequence[User]) -> Optional[User]:
    """Return the member a token refers to, or None when nobody matches.

    Within a rule, the first member in roster order wins.
    """

    token = token.strip()
    if not token:
        return None
    for rule in MATCH_RULES:
        for user in roster:
            if rule(token, user):
                return user
    return None


def search_members(term: str, roster: Sequence[User]) -> List[User]:
    """Filter the roster by name, phone or identifier fragment."""

    term = term.strip()
    if not term:
        return list(roster)
    lowered = term.lower()
    return [
        user
        for user in roster
        if lowered in user.name.lower() or term in user.phone or term in user.identifier
    ]


def mask_phone(phone: str) -> str:
    """Hide the middle digits of a phone number for display."""

    if not phone or phone == "-" or len(phone) < 7:
        return phone or "-"
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) >= 10:
        middle = "****" if len(digits) == 11 else "***"
        return f"{digits[:3]}-{middle}-{digits[-4:]}"
    return phone


__all__ = ["match", "search_members", "mask_phone", "MATCH_RULES"]
