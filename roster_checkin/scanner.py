"""Scan session: the camera polling loop and manual entry as a state machine."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from .errors import CameraUnavailable, UnrecognizedToken
from .models import CheckIn

logger = logging.getLogger(__name__)

UNREGISTERED_NOTICE = "Unregistered member"


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class FrameSource(Protocol):
    """A capture device; entering acquires it and exiting must release it."""

    def __enter__(self) -> "FrameSource":
        ...

    def __exit__(self, *exc_info: Any) -> Optional[bool]:
        ...

    def read(self) -> Optional[Any]:
        ...


Decoder = Callable[[Any], Optional[str]]


@dataclass(slots=True)
class ScanOutcome:
    token: str
    origin: str
    check_in: Optional[CheckIn] = None
    accepted: bool = False


class ScanSession:
    """Drives one scan view from first frame to an accepted check-in.

    The camera loop and manual entry may both submit tokens; whichever
    resolves to a member first is kept and the other is ignored until
    :meth:`reset`.
    """

    def __init__(
        self,
        check_in: Callable[[str], CheckIn],
        *,
        frame_interval: float = 1 / 30,
        retry_delay: float = 2.0,
    ) -> None:
        self._check_in = check_in
        self.frame_interval = frame_interval
        self.retry_delay = retry_delay
        self.state = ScanState.IDLE
        self.result: Optional[CheckIn] = None
        self.notice: Optional[str] = None

    def submit(self, token: str, origin: str = "manual") -> ScanOutcome:
        """Resolve a token unless another one already won."""

        if self.state is ScanState.RESOLVED:
            logger.debug("Ignoring %s token; session already resolved", origin)
            return ScanOutcome(token=token, origin=origin, check_in=self.result)
        try:
            result = self._check_in(token)
        except UnrecognizedToken:
            self.notice = UNREGISTERED_NOTICE
            logger.info("Unrecognized %s token %r", origin, token)
            return ScanOutcome(token=token, origin=origin)
        self.result = result
        self.notice = None
        self.state = ScanState.RESOLVED
        return ScanOutcome(token=token, origin=origin, check_in=result, accepted=True)

    async def run(self, source: FrameSource, decode: Decoder) -> Optional[CheckIn]:
        """Poll frames until a token resolves, the session is cancelled or fails."""

        if self.state is ScanState.RESOLVED:
            return self.result
        self.state = ScanState.SCANNING
        try:
            with source:
                while self.state is ScanState.SCANNING:
                    # grab and decode block, so they run off the event loop
                    frame = await asyncio.to_thread(source.read)
                    if self.state is not ScanState.SCANNING:
                        break
                    token = await asyncio.to_thread(decode, frame) if frame is not None else None
                    if self.state is not ScanState.SCANNING:
                        break
                    if token is None:
                        await asyncio.sleep(self.frame_interval)
                        continue
                    outcome = self.submit(token, origin="camera")
                    if outcome.accepted or self.state is not ScanState.SCANNING:
                        break
                    await asyncio.sleep(self.retry_delay)
                    if self.state is ScanState.SCANNING:
                        self.notice = None
        except CameraUnavailable:
            self.state = ScanState.IDLE
            raise
        finally:
            if self.state is ScanState.SCANNING:
                self.state = ScanState.CANCELLED
        return self.result

    def cancel(self) -> None:
        if self.state is not ScanState.RESOLVED:
            self.state = ScanState.CANCELLED

    def reset(self) -> None:
        self.state = ScanState.IDLE
        self.result = None
        self.notice = None


__all__ = ["ScanSession", "ScanState", "ScanOutcome", "FrameSource", "Decoder", "UNREGISTERED_NOTICE"]
