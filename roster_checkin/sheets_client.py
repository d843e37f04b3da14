"""HTTP client for the Google Sheets export and values endpoints."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx

from .errors import FailureKind

SHEETS_API_BASE = "https://sheets.googleapis.com/v4/spreadsheets"
EXPORT_BASE = "https://docs.google.com/spreadsheets/d"

ACCESS_STATUSES = {400, 401, 403, 404}


class SheetsApiError(RuntimeError):
    """Raised when a spreadsheet endpoint fails or returns an error response."""

    def __init__(self, method: str, error: str, status: Optional[int] = None) -> None:
        super().__init__(f"Sheets API error for {method}: {error}")
        self.method = method
        self.error = error
        self.status = status

    @property
    def kind(self) -> FailureKind:
        if self.status in ACCESS_STATUSES:
            return FailureKind.ACCESS
        return FailureKind.NETWORK


class SheetsClient:
    """Async wrapper around the spreadsheet endpoints used for the roster."""

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        verb = kwargs.pop("verb", "GET")
        try:
            response = await self._client.request(verb, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise SheetsApiError(method, "request timed out") from exc
        except httpx.HTTPError as exc:
            raise SheetsApiError(method, f"network error: {exc}") from exc
        if response.is_error:
            raise SheetsApiError(method, _error_message(response), response.status_code)
        return response

    async def export_csv(self, sheet_id: str, sheet_ref: str, *, timeout: Optional[float] = None) -> str:
        """Return the plain CSV export of one tab, bypassing intermediate caches."""

        method = "export"
        params = {
            "format": "csv",
            "gid": sheet_ref,
            "t": str(int(time.time() * 1000)),
        }
        response = await self._request(
            method,
            f"{EXPORT_BASE}/{sheet_id}/export",
            params=params,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            # Private sheets answer with the sign-in page instead of a 403.
            raise SheetsApiError(method, "export is not publicly readable", 403)
        return response.text

    async def get_values(
        self,
        sheet_id: str,
        cell_range: str,
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[List[str]]:
        method = "values.get"
        response = await self._request(
            method,
            f"{SHEETS_API_BASE}/{sheet_id}/values/{quote(cell_range, safe='!:')}",
            params=_key_params(api_key),
            headers=_auth_headers(access_token),
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        values = _json_body(method, response).get("values", [])
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise SheetsApiError(method, "malformed response", response.status_code)
        return values

    async def append_values(
        self,
        sheet_id: str,
        cell_range: str,
        rows: Sequence[Sequence[Any]],
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        method = "values.append"
        params = {"valueInputOption": "USER_ENTERED", **_key_params(api_key)}
        response = await self._request(
            method,
            f"{SHEETS_API_BASE}/{sheet_id}/values/{quote(cell_range, safe='!:')}:append",
            verb="POST",
            params=params,
            headers=_auth_headers(access_token),
            json={"values": [list(row) for row in rows]},
        )
        return _json_body(method, response)

    async def get_title(self, sheet_id: str, *, api_key: Optional[str] = None, timeout: Optional[float] = None) -> str:
        method = "spreadsheets.get"
        params = {"fields": "properties.title", **_key_params(api_key)}
        response = await self._request(
            method,
            f"{SHEETS_API_BASE}/{sheet_id}",
            params=params,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        properties = _json_body(method, response).get("properties")
        if not isinstance(properties, dict):
            raise SheetsApiError(method, "malformed response", response.status_code)
        return properties.get("title", "")


def _key_params(api_key: Optional[str]) -> Dict[str, str]:
    return {"key": api_key} if api_key else {}


def _auth_headers(access_token: Optional[str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"} if access_token else {}


def _json_body(method: str, response: httpx.Response) -> Dict[str, Any]:
    """Decode a JSON object body; proxies and portals can answer 2xx with HTML."""

    try:
        data = response.json()
    except ValueError as exc:
        raise SheetsApiError(method, "malformed response", response.status_code) from exc
    if not isinstance(data, dict):
        raise SheetsApiError(method, "malformed response", response.status_code)
    return data


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("message") or error.get("status") or f"HTTP {response.status_code}"
    return str(error or f"HTTP {response.status_code}")


__all__ = ["SheetsClient", "SheetsApiError"]
