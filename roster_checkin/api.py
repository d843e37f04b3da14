"""FastAPI application exposing the Roster Check-in REST API."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, List, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .attendance import AttendanceLog, date_key
from .config import Settings, load_settings
from .db import Database
from .errors import FailureKind, IngestionFailure, InvalidMember, UnrecognizedToken, WritePermissionDenied
from .models import CheckIn
from .service import RosterService, member_summary
from .sheets_client import SheetsApiError, SheetsClient

logger = logging.getLogger(__name__)


class NewMember(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = ""
    birthdate: str = ""
    gender: str = ""
    district: str = ""
    address: str = ""
    category: str = ""
    identifier: Optional[str] = None


class TokenRequest(BaseModel):
    token: str


def _failure_status(kind: FailureKind) -> int:
    if kind is FailureKind.ACCESS:
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_503_SERVICE_UNAVAILABLE


def _checkin_payload(svc: RosterService, result: CheckIn) -> dict[str, Any]:
    return {
        "date": result.day,
        "first_visit": result.first_visit,
        "member": member_summary(result.member),
        "today_count": svc.today_count(result.day),
    }


def create_app(settings: Optional[Settings] = None, service: Optional[RosterService] = None) -> FastAPI:
    settings = settings or load_settings()
    if service is None:
        client = SheetsClient(timeout=settings.fetch_timeout)
        attendance = AttendanceLog.open(Database(settings.database_path))
        service = RosterService(settings, client, attendance)

    async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> None:
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def date_dependency(day: Optional[str] = None) -> date:
        if not day:
            return datetime.now().date()
        try:
            return datetime.strptime(day, "%Y-%m-%d").date()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD") from exc

    app = FastAPI(title="Roster Check-in API", version="1.0.0")

    @app.exception_handler(IngestionFailure)
    async def ingestion_failure_handler(request: Request, exc: IngestionFailure) -> JSONResponse:
        return JSONResponse(
            status_code=_failure_status(exc.kind),
            content={"detail": str(exc), "kind": exc.kind.value},
        )

    @app.exception_handler(SheetsApiError)
    async def sheets_error_handler(request: Request, exc: SheetsApiError) -> JSONResponse:
        return JSONResponse(
            status_code=_failure_status(exc.kind),
            content={"detail": str(exc), "kind": exc.kind.value},
        )

    @app.exception_handler(WritePermissionDenied)
    async def write_denied_handler(request: Request, exc: WritePermissionDenied) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": str(exc), "kind": FailureKind.ACCESS.value},
        )

    @app.exception_handler(InvalidMember)
    async def invalid_member_handler(request: Request, exc: InvalidMember) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "fields": exc.reasons},
        )

    @app.exception_handler(UnrecognizedToken)
    async def unrecognized_token_handler(request: Request, exc: UnrecognizedToken) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "Unregistered member", "token": exc.token},
        )

    @app.on_event("startup")
    async def startup_event() -> None:  # pragma: no cover - io bound
        try:
            await service.refresh()
        except IngestionFailure as exc:
            logger.error("Initial roster load failed: %s", exc)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        service.attendance.save()
        await service.client.close()

    def get_service() -> RosterService:
        return service

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/roster")
    async def get_roster(
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        snapshot = svc.snapshot
        return {
            "fetched_at": snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
            "source": snapshot.source,
            "members": [member_summary(user) for user in snapshot.members],
        }

    @app.post("/api/roster/refresh")
    async def refresh_roster(
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        snapshot = await svc.refresh()
        return {"source": snapshot.source, "total_members": len(snapshot.members)}

    @app.get("/api/members/search")
    async def search_members(
        q: str = "",
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        return {"query": q, "members": [member_summary(user) for user in svc.search(q)]}

    @app.post("/api/members", status_code=status.HTTP_201_CREATED)
    async def add_member(
        member: NewMember,
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        user = (await svc.add_members([member.model_dump(exclude_none=True)]))[0]
        return {"member": member_summary(user)}

    @app.post("/api/members/batch", status_code=status.HTTP_201_CREATED)
    async def add_members(
        members: List[NewMember],
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        users = await svc.add_members([member.model_dump(exclude_none=True) for member in members])
        return {"added": len(users), "members": [member_summary(user) for user in users]}

    @app.post("/api/checkin")
    async def check_in(
        body: TokenRequest,
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, Any]:
        return _checkin_payload(svc, svc.check_in(body.token))

    @app.post("/api/checkin/image")
    async def check_in_image(
        image: UploadFile = File(...),
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, Any]:
        from .camera import decode_image

        token = decode_image(await image.read())
        if not token:
            raise HTTPException(status_code=400, detail="No QR code found in the image")
        return _checkin_payload(svc, svc.check_in(token))

    @app.get("/api/attendance")
    async def get_attendance(
        d: date = Depends(date_dependency),
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        day = d.isoformat()
        records = svc.attendance_for(day)
        return {"date": day, "count": len(records), "members": records}

    @app.get("/api/attendance/history")
    async def get_attendance_history(
        days: int = 30,
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        end = datetime.now().date()
        start = end - timedelta(days=max(days, 1) - 1)
        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "trend": svc.attendance_history(start, end),
        }

    @app.get("/api/dashboard")
    async def get_dashboard(
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        return svc.dashboard(date_key())

    @app.get("/api/connection")
    async def check_connection(
        _: None = Depends(verify_api_key),
        svc: RosterService = Depends(get_service),
    ) -> dict[str, object]:
        title = await svc.check_connection()
        return {"ok": True, "title": title}

    return app


__all__ = ["create_app"]
