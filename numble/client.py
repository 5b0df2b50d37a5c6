"""
- HTTP client for the multiplayer API
Thin wrapper over requests so scripts, bots and tests can play a session.
Every call has a short timeout; failures raise SessionClientError with the
server's error code when there is one, nothing is retried here.
"""

import logging
import secrets
import string
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
TIMEOUT_SECONDS = 3.0


class SessionClientError(Exception):
    def __init__(self, status_code: Optional[int], detail: str, code: Optional[str] = None) -> None:
        self.status_code = status_code
        self.detail = detail
        self.code = code
        super().__init__(f"{status_code}: {detail}" if status_code else detail)


def generate_player_id(length: int = 20) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class SessionClient:
    """
    http can be a requests.Session (default) or anything with the same
    get/post signature, e.g. FastAPI's TestClient with base_url="".
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, http: Any = None, timeout: float = TIMEOUT_SECONDS) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.timeout = timeout

    def _handle(self, response: Any) -> Dict[str, Any]:
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            detail = body.get("detail") or response.text or "Request failed"
            raise SessionClientError(response.status_code, str(detail), body.get("code"))
        return response.json()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.http.post(self.base_url + path, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("POST %s failed: %s", path, exc)
            raise SessionClientError(None, str(exc)) from exc
        return self._handle(response)

    def _get(self, path: str) -> Dict[str, Any]:
        try:
            response = self.http.get(self.base_url + path, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("GET %s failed: %s", path, exc)
            raise SessionClientError(None, str(exc)) from exc
        return self._handle(response)

    # --- Public API ---

    def create(self, player_id: str) -> Dict[str, Any]:
        """Returns {"session_id": ..., "session": {...}}."""
        return self._post("/api/multiplayer/create", {"playerId": player_id})

    def join(self, session_id: str, player_id: str) -> Dict[str, Any]:
        return self._post("/api/multiplayer/join", {"sessionId": session_id, "playerId": player_id})["session"]

    def guess(self, session_id: str, player_id: str, guess: str) -> Dict[str, Any]:
        payload = {"sessionId": session_id, "playerId": player_id, "guess": guess}
        return self._post("/api/multiplayer/guess", payload)["session"]

    def fetch(self, session_id: str) -> Dict[str, Any]:
        return self._get(f"/api/multiplayer/session/{session_id}")["session"]
