"""MCP server exposing roster and attendance tools."""

from __future__ import annotations

import asyncio
from typing import Optional

from mcp.server.fastmcp import FastMCP

from .attendance import AttendanceLog, date_key
from .config import load_settings
from .db import Database
from .errors import UnrecognizedToken
from .service import RosterService, member_summary
from .sheets_client import SheetsClient

mcp = FastMCP("roster-checkin")

_settings = load_settings()
_client = SheetsClient(timeout=_settings.fetch_timeout)
_service = RosterService(_settings, _client, AttendanceLog.open(Database(_settings.database_path)))
_refresh_lock = asyncio.Lock()


async def _ensure_roster() -> None:
    async with _refresh_lock:
        if _service.snapshot.fetched_at is None:
            await _service.refresh()


@mcp.tool()
async def get_roster(refresh: bool = False) -> dict:
    """Return the current roster, newest members first."""

    if refresh:
        async with _refresh_lock:
            await _service.refresh()
    else:
        await _ensure_roster()
    return {
        "total_members": len(_service.roster),
        "members": [member_summary(user) for user in _service.roster],
    }


@mcp.tool()
async def find_member(term: str) -> dict:
    """Search members by name, phone fragment or identifier."""

    await _ensure_roster()
    return {"query": term, "members": [member_summary(user) for user in _service.search(term)]}


@mcp.tool()
async def check_in(token: str) -> dict:
    """Record today's visit for the member a token refers to."""

    await _ensure_roster()
    try:
        result = _service.check_in(token)
    except UnrecognizedToken:
        return {"ok": False, "token": token, "detail": "Unregistered member"}
    return {
        "ok": True,
        "date": result.day,
        "first_visit": result.first_visit,
        "member": member_summary(result.member),
    }


@mcp.tool()
async def get_attendance(date: Optional[str] = None) -> dict:
    """Return who checked in on a date (default today)."""

    day = date or date_key()
    await _ensure_roster()
    records = _service.attendance_for(day)
    return {"date": day, "count": len(records), "members": records}


__all__ = ["mcp", "get_roster", "find_member", "check_in", "get_attendance"]
