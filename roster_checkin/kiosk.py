"""Terminal check-in kiosk: camera scanning with manual entry alongside."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .errors import CameraUnavailable
from .scanner import Decoder, FrameSource, ScanSession, ScanState
from .service import RosterService

logger = logging.getLogger(__name__)

RESULT_HOLD_SECONDS = 3.0


async def manual_entry(session: ScanSession) -> None:
    """Feed typed tokens into whichever scan the session is running."""

    while True:
        token = await asyncio.to_thread(input, "Member number or phone: ")
        if not token.strip():
            continue
        outcome = session.submit(token)
        if not outcome.accepted and session.notice:
            print(session.notice)


async def scan_once(
    session: ScanSession,
    source: Optional[FrameSource],
    decode: Optional[Decoder],
    poll_interval: float = 0.1,
) -> None:
    """Wait until a member is resolved by the camera or the keyboard."""

    if source is not None and decode is not None:
        try:
            await session.run(source, decode)
        except CameraUnavailable as exc:
            logger.warning("%s; continuing with manual entry", exc)
    while session.state is not ScanState.RESOLVED:
        await asyncio.sleep(poll_interval)

    result = session.result
    member = result.member
    suffix = "" if result.first_visit else " (already checked in today)"
    print(f"Checked in: {member.name} #{member.serial}{suffix}")


async def run_kiosk(
    service: RosterService,
    source: Optional[FrameSource] = None,
    decode: Optional[Decoder] = None,
) -> None:
    await service.refresh()
    session = ScanSession(service.check_in)
    manual = asyncio.create_task(manual_entry(session))
    try:
        while True:
            await scan_once(session, source, decode)
            await asyncio.sleep(RESULT_HOLD_SECONDS)
            session.reset()
    finally:
        manual.cancel()
        session.cancel()
        service.attendance.save()
        await service.client.close()


__all__ = ["run_kiosk", "scan_once", "manual_entry"]
