"""SQLite persistence layer for attendance records."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterator, List

Connection = sqlite3.Connection


class Database:
    """Lightweight wrapper around SQLite operations."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS attendance (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    date TEXT NOT NULL,
                    member_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(date, member_id)
                )
                """
            )
            conn.commit()

    # region Attendance
    def load_attendance(self) -> Dict[str, List[str]]:
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT date, member_id FROM attendance ORDER BY date, position"
            )
            days: Dict[str, List[str]] = {}
            for row in cursor.fetchall():
                days.setdefault(row["date"], []).append(row["member_id"])
            return days

    def save_attendance(self, day: str, member_ids: Iterable[str]) -> None:
        with self.connect() as conn:
            conn.executemany(
                """
                INSERT INTO attendance (date, member_id, position)
                VALUES (?, ?, ?)
                ON CONFLICT(date, member_id) DO NOTHING
                """,
                [(day, member_id, position) for position, member_id in enumerate(member_ids)],
            )
            conn.commit()

    def get_daily_counts(self, start_day: date, end_day: date) -> List[Dict[str, Any]]:
        with self.connect() as conn:
            cursor = conn.execute(
                """
                SELECT date, COUNT(*) as total
                FROM attendance
                WHERE date BETWEEN ? AND ?
                GROUP BY date
                ORDER BY date
                """,
                (start_day.isoformat(), end_day.isoformat()),
            )
            return [{"date": row["date"], "total": row["total"]} for row in cursor.fetchall()]

    # endregion


__all__ = ["Database"]
