"""Entrypoints for the REST API (`python -m roster_checkin.main`) and the kiosk."""

from __future__ import annotations

import asyncio
import logging
import os

import uvicorn

from .api import create_app
from .config import load_settings


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )


def run() -> None:
    _configure_logging()
    env_file = os.getenv("ROSTER_CHECKIN_ENV")
    settings = load_settings(env_file)
    app = create_app(settings)
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_kiosk() -> None:
    from .attendance import AttendanceLog
    from .camera import OpenCVCamera, decode_frame
    from .db import Database
    from .kiosk import run_kiosk as kiosk_loop
    from .service import RosterService
    from .sheets_client import SheetsClient

    _configure_logging()
    settings = load_settings(os.getenv("ROSTER_CHECKIN_ENV"))
    service = RosterService(
        settings,
        SheetsClient(timeout=settings.fetch_timeout),
        AttendanceLog.open(Database(settings.database_path)),
    )
    try:
        asyncio.run(kiosk_loop(service, OpenCVCamera(settings.camera_index), decode_frame))
    except KeyboardInterrupt:  # pragma: no cover - interactive
        pass


if __name__ == "__main__":  # pragma: no cover
    run()
