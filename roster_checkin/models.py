"""Dataclasses representing roster check-in domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class User:
    serial: int
    name: str
    birthdate: str
    phone: str
    identifier: str
    gender: str = ""
    district: str = ""
    address: str = ""
    category: str = ""


@dataclass(frozen=True, slots=True)
class RosterSnapshot:
    """One ingestion run's members, ordered by serial descending."""

    members: tuple[User, ...] = ()
    fetched_at: Optional[datetime] = None
    source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class FetchConfig:
    """Where to read the roster from; passed by value on every fetch."""

    sheet_id: str
    sheet_ref: str = "0"
    range: str = "Sheet1!A:H"
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    timeout: float = 5.0


@dataclass(frozen=True, slots=True)
class CheckIn:
    member: User
    day: str
    first_visit: bool


__all__ = ["User", "RosterSnapshot", "FetchConfig", "CheckIn"]
