"""Configuration helpers for Roster Check-in."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import FetchConfig
from .schema import RosterSchema, get_schema


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    sheet_id: str
    api_key: str
    database_path: Path
    schema: RosterSchema
    sheet_gid: str = "0"
    sheet_range: Optional[str] = None
    sheets_api_key: Optional[str] = None
    sheets_access_token: Optional[str] = None
    fetch_timeout: float = 5.0
    camera_index: int = 0

    def fetch_config(self) -> FetchConfig:
        return FetchConfig(
            sheet_id=self.sheet_id,
            sheet_ref=self.sheet_gid,
            range=self.sheet_range or self.schema.default_range,
            api_key=self.sheets_api_key,
            access_token=self.sheets_access_token,
            timeout=self.fetch_timeout,
        )


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    db_path = Path(os.getenv("DATABASE_PATH", "roster_checkin.db")).expanduser()

    sheet_id = os.getenv("SHEET_ID")
    api_key = os.getenv("API_KEY")

    if not sheet_id:
        raise RuntimeError("SHEET_ID must be configured")
    if not api_key:
        raise RuntimeError("API_KEY must be configured")

    return Settings(
        sheet_id=sheet_id,
        api_key=api_key,
        database_path=db_path,
        schema=get_schema(os.getenv("ROSTER_SCHEMA", "serial")),
        sheet_gid=os.getenv("SHEET_GID", "0"),
        sheet_range=os.getenv("SHEET_RANGE") or None,
        sheets_api_key=os.getenv("SHEETS_API_KEY") or None,
        sheets_access_token=os.getenv("SHEETS_ACCESS_TOKEN") or None,
        fetch_timeout=float(os.getenv("FETCH_TIMEOUT", "5")),
        camera_index=int(os.getenv("CAMERA_INDEX", "0")),
    )


__all__ = ["Settings", "load_settings"]
