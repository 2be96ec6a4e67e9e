"""
client.py: HTTP client for the callboard API.

Thin wrapper over `requests.Session`; the session keeps the login cookie.
There are no retries: a failed call surfaces to the caller, who either
retries by hand or falls back to the offline mirror.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import requests


class CallboardClientError(RuntimeError):
    """Base exception for client failures."""


class OfflineError(CallboardClientError):
    """Raised when the server cannot be reached at all."""


class CallboardAPIError(CallboardClientError):
    """Raised when the server answers with an error status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


@dataclass(frozen=True)
class ClientSettings:
    base_url: str
    timeout_seconds: float = 10.0


class CallboardClient:
    def __init__(self, settings: ClientSettings, session: Optional[requests.Session] = None):
        self._settings = settings
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self._settings.base_url.rstrip('/')}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self._session.request(
                method, self._url(path), timeout=self._settings.timeout_seconds, **kwargs
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise OfflineError(str(exc)) from exc

        if not response.ok:
            try:
                message = (response.json() or {}).get("error") or response.reason
            except ValueError:
                message = response.reason
            raise CallboardAPIError(response.status_code, message or "Request failed")
        return response.json()

    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/login", json={"email": email, "password": password})["user"]

    def list_actors(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/users", params={"role": "actor"})

    def list_shows(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Dict[str, Any]]:
        params = {}
        if start:
            params["start"] = start.isoformat()
        if end:
            params["end"] = end.isoformat()
        return self._request("GET", "/shows", params=params)

    def list_attendance(self, show_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", "/attendance", params={"showId": show_id})

    def bulk_mark(self, show_id: int, user_ids: Iterable[int]) -> int:
        body = {"showId": show_id, "userIds": list(user_ids)}
        return int(self._request("POST", "/attendance/bulk", json=body)["count"])
