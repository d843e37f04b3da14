"""Core orchestration logic for Roster Check-in."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .attendance import AttendanceLog, AttendanceRecorder, date_key
from .config import Settings
from .errors import FailureKind, InvalidMember, UnrecognizedToken, WritePermissionDenied
from .fetcher import SourceFetcher
from .matcher import mask_phone, match, search_members
from .models import CheckIn, RosterSnapshot, User
from .schema import LEGACY_SCHEMA
from .sheets_client import SheetsApiError, SheetsClient
from .validator import inspect_row

logger = logging.getLogger(__name__)


class RosterService:
    """High-level service that syncs the roster and records check-ins."""

    def __init__(
        self,
        settings: Settings,
        client: SheetsClient,
        attendance: AttendanceLog,
        fetcher: Optional[SourceFetcher] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.attendance = attendance
        self.recorder = AttendanceRecorder(attendance)
        self.fetcher = fetcher or SourceFetcher(client, settings.schema)
        self._snapshot = RosterSnapshot()

    # region Roster
    @property
    def snapshot(self) -> RosterSnapshot:
        return self._snapshot

    @property
    def roster(self) -> Sequence[User]:
        return self._snapshot.members

    async def refresh(self) -> RosterSnapshot:
        members = await self.fetcher.fetch_roster(self.settings.fetch_config())
        snapshot = RosterSnapshot(
            members=tuple(members),
            fetched_at=datetime.now(timezone.utc),
            source=self.fetcher.last_source,
        )
        self._snapshot = snapshot
        logger.info("Roster refreshed from %s: %s members", snapshot.source, len(snapshot.members))
        return snapshot

    def search(self, term: str) -> List[User]:
        return search_members(term, self.roster)

    async def check_connection(self) -> str:
        config = self.settings.fetch_config()
        return await self.client.get_title(config.sheet_id, api_key=config.api_key, timeout=config.timeout)

    # endregion

    # region Members
    async def add_member(self, name: str, phone: str = "", birthdate: str = "", **extra: str) -> User:
        users = await self.add_members([{"name": name, "phone": phone, "birthdate": birthdate, **extra}])
        return users[0]

    async def add_members(self, entries: Iterable[Dict[str, Any]]) -> List[User]:
        """Append new members after the highest serial on the sheet, then refresh.

        The roster is re-read first; a failed read aborts before anything is
        written. Rows the roster could not read back raise InvalidMember.
        """

        entries = list(entries)
        if not entries:
            return []
        await self.refresh()

        schema = self.settings.schema
        next_serial = max((user.serial for user in self.roster), default=0) + 1
        today = datetime.now().strftime("%Y.%m.%d")
        users: List[User] = []
        for offset, entry in enumerate(entries):
            serial = next_serial + offset
            if schema.name == LEGACY_SCHEMA.name:
                identifier = entry.get("identifier") or uuid.uuid4().hex[:8].upper()
                birthdate = (entry.get("birthdate") or "").strip() or today
            else:
                identifier = str(serial)
                birthdate = (entry.get("birthdate") or "").strip()
            user = User(
                serial=serial,
                name=entry["name"].strip(),
                birthdate=birthdate,
                phone=(entry.get("phone") or "").strip(),
                identifier=identifier,
                gender=entry.get("gender", ""),
                district=entry.get("district", ""),
                address=entry.get("address", ""),
                category=entry.get("category", ""),
            )
            verdict = inspect_row(schema.to_row(user), schema)
            if not verdict.accepted:
                raise InvalidMember(user.name, verdict.reasons)
            users.append(user)

        config = self.settings.fetch_config()
        try:
            await self.client.append_values(
                config.sheet_id,
                config.range,
                [schema.to_row(user) for user in users],
                api_key=config.api_key,
                access_token=config.access_token,
            )
        except SheetsApiError as exc:
            if exc.kind is FailureKind.ACCESS:
                logger.error("Append rejected by the spreadsheet: %s", exc.error)
                raise WritePermissionDenied(
                    "Saving failed: check that the credentials can edit the spreadsheet"
                ) from exc
            raise
        logger.info("Appended %s member(s) starting at serial %s", len(users), next_serial)
        await self.refresh()
        return users

    # endregion

    # region Check-ins
    def check_in(self, token: str, day: Optional[str] = None) -> CheckIn:
        member = match(token, self.roster)
        if member is None:
            raise UnrecognizedToken(token)
        day = day or date_key()
        first_visit = self.recorder.record_visit(day, member.identifier)
        self.attendance.save()
        return CheckIn(member=member, day=day, first_visit=first_visit)

    def today_count(self, day: Optional[str] = None) -> int:
        return self.recorder.count_for_date(day or date_key())

    def attendance_for(self, day: str) -> List[Dict[str, Any]]:
        by_identifier = {user.identifier: user for user in self.roster}
        records: List[Dict[str, Any]] = []
        for member_id in self.recorder.members_for_date(day):
            user = by_identifier.get(member_id)
            records.append(
                {
                    "identifier": member_id,
                    "serial": user.serial if user else None,
                    "name": user.name if user else None,
                }
            )
        return records

    def attendance_history(self, start: date, end: date) -> List[Dict[str, Any]]:
        database = self.attendance.database
        if database is None:
            return []
        return database.get_daily_counts(start, end)

    def dashboard(self, day: Optional[str] = None, recent: int = 5) -> Dict[str, Any]:
        day = day or date_key()
        return {
            "date": day,
            "total_members": len(self.roster),
            "today_count": self.today_count(day),
            "recent_members": [member_summary(user) for user in self.roster[:recent]],
            "fetched_at": self._snapshot.fetched_at.isoformat() if self._snapshot.fetched_at else None,
        }

    # endregion


def member_summary(user: User) -> Dict[str, Any]:
    data = asdict(user)
    data["phone"] = mask_phone(user.phone)
    return data


__all__ = ["RosterService", "member_summary"]
