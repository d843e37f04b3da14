"""Day-scoped attendance store and the recorder that writes to it."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from .db import Database

logger = logging.getLogger(__name__)


def date_key(moment: Optional[datetime] = None) -> str:
    """Local calendar day of ``moment`` (default: now) as ``YYYY-MM-DD``."""

    moment = moment or datetime.now()
    return moment.date().isoformat()


class AttendanceLog:
    """Member identifiers checked in per day, in check-in order.

    Loaded from the database when the session starts and written back only
    when :meth:`save` is called. Days are never evicted.
    """

    def __init__(self, database: Optional[Database] = None) -> None:
        self.database = database
        self._days: Dict[str, List[str]] = {}
        self._dirty: set[str] = set()

    @classmethod
    def open(cls, database: Database) -> "AttendanceLog":
        log = cls(database)
        log._days = database.load_attendance()
        return log

    def add(self, day: str, member_id: str) -> bool:
        members = self._days.setdefault(day, [])
        if member_id in members:
            return False
        members.append(member_id)
        self._dirty.add(day)
        return True

    def members(self, day: str) -> List[str]:
        return list(self._days.get(day, ()))

    def count(self, day: str) -> int:
        return len(self._days.get(day, ()))

    def save(self) -> int:
        """Flush days changed since the last save; returns how many were written."""

        if self.database is None or not self._dirty:
            return 0
        flushed = 0
        for day in sorted(self._dirty):
            self.database.save_attendance(day, self._days[day])
            flushed += 1
        self._dirty.clear()
        logger.debug("Saved attendance for %s day(s)", flushed)
        return flushed


class AttendanceRecorder:
    """Records at most one visit per member per day."""

    def __init__(self, log: AttendanceLog) -> None:
        self.log = log

    def record_visit(self, day: str, member_id: str) -> bool:
        recorded = self.log.add(day, member_id)
        if recorded:
            logger.info("Recorded visit for %s on %s", member_id, day)
        else:
            logger.info("%s already checked in on %s", member_id, day)
        return recorded

    def count_for_date(self, day: str) -> int:
        return self.log.count(day)

    def members_for_date(self, day: str) -> List[str]:
        return self.log.members(day)


__all__ = ["AttendanceLog", "AttendanceRecorder", "date_key"]
