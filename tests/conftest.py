import json

import httpx
import pytest

from roster_checkin.attendance import AttendanceLog
from roster_checkin.config import Settings
from roster_checkin.db import Database
from roster_checkin.models import User
from roster_checkin.schema import SERIAL_SCHEMA
from roster_checkin.sheets_client import SheetsClient

EXPORT_BODY = "\n".join(
    [
        "연번,이름,생년월일,성별,관할동,주소,전화,보호유형",
        '1,김철수,450101,남,중앙동,"서울시 중구, 1번지",010-1111-2222,기초수급',
        "2,이영희,520303,여,남산동,서울시 중구 2번지,010-3333-4444,차상위",
        ",,,,,,,",
        "3,박민수,600707,남,중앙동,서울시 중구 3번지,010-5555-6666,기초수급",
    ]
)


def make_user(serial, name=None, phone="010-0000-0000", identifier=None, birthdate="450101", **extra):
    return User(
        serial=serial,
        name=name or f"회원{serial}",
        birthdate=birthdate,
        phone=phone,
        identifier=identifier if identifier is not None else str(serial),
        **extra,
    )


class FakeFetcher:
    def __init__(self, members=None, error=None):
        self.members = list(members or [])
        self.error = error
        self.calls = 0
        self.last_source = "export"

    async def fetch_roster(self, config):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.members)


class Router:
    """Minimal request router for httpx.MockTransport."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path_suffix, responder):
        self.routes[(method, path_suffix)] = responder

    def count(self, path_suffix):
        return sum(1 for request in self.requests if request.url.path.endswith(path_suffix))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for (method, suffix), responder in self.routes.items():
            if request.method == method and request.url.path.endswith(suffix):
                if callable(responder):
                    return responder(request)
                return responder
        return httpx.Response(404, json={"error": {"message": "not found"}})


class FakeSheet:
    """In-memory spreadsheet: serves the CSV export and keeps appended rows."""

    def __init__(self, body=""):
        self.lines = [line for line in body.split("\n") if line]

    def export(self, request):
        return httpx.Response(200, text="\n".join(self.lines), headers={"content-type": "text/csv"})

    def append(self, request):
        rows = json.loads(request.content)["values"]
        self.lines.extend(",".join(row) for row in rows)
        return httpx.Response(200, json={"updates": {"updatedRows": len(rows)}})

    def install(self, router, cell_range="Sheet1!A:H"):
        router.add("GET", "/export", self.export)
        router.add("POST", f"/values/{cell_range}:append", self.append)
        return self


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def sheets_client(router):
    return SheetsClient(transport=httpx.MockTransport(router))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        sheet_id="sheet123",
        api_key="secret",
        database_path=tmp_path / "roster.db",
        schema=SERIAL_SCHEMA,
        sheets_api_key="read-key",
    )


@pytest.fixture
def database(settings):
    return Database(settings.database_path)


@pytest.fixture
def attendance_log(database):
    return AttendanceLog.open(database)
