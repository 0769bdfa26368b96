import logging
import os
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """A failed API call, with the backend's ``msg`` when it sent one."""

    def __init__(self, status: Optional[int], msg: Optional[str] = None, payload: Any = None):
        self.status = status
        self.msg = msg or (f"Request failed with status {status}" if status else "Request failed")
        self.payload = payload
        super().__init__(self.msg)


class CancelToken:
    """Lets a caller drop a response that arrives after it stopped caring."""

    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


def _timeout_from_env() -> float:
    try:
        return float(os.getenv("LEQET_HTTP_TIMEOUT", DEFAULT_TIMEOUT))
    except ValueError:
        return DEFAULT_TIMEOUT


def _error_message(resp) -> tuple:
    try:
        payload = resp.json()
    except ValueError:
        return None, None
    if isinstance(payload, dict):
        return payload.get("msg") or payload.get("message") or payload.get("error"), payload
    return None, payload


class AuthSession:
    """Owns the HTTP session, the base URL and the bearer token of one user."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: Optional[float] = None,
                 http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else _timeout_from_env()
        self.http = http or requests.Session()
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    @classmethod
    def from_env(cls) -> "AuthSession":
        load_dotenv()
        return cls(base_url=os.getenv("LEQET_API_URL", DEFAULT_BASE_URL))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[str]:
        return (self.user or {}).get("role")

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def request(self, method: str, path: str, json=None, params=None, cancel_token: Optional[CancelToken] = None):
        """Send one request and return the decoded body (None for empty bodies).

        Raises ApiError on transport failures and non-2xx answers. When
        ``cancel_token`` was cancelled while the request was in flight the
        response is dropped and None is returned.
        """
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(
                method, url, json=json, params=params, headers=self.headers(), timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(None, f"Network error: {e}")

        if cancel_token is not None and cancel_token.cancelled:
            logger.debug(f"Dropping cancelled response for {method} {path}")
            return None

        if not resp.ok:
            msg, payload = _error_message(resp)
            raise ApiError(resp.status_code, msg, payload)

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            raise ApiError(resp.status_code, "Invalid JSON in response")

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self.request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = (data or {}).get("access_token")
        self.user = (data or {}).get("user")
        if not self.token:
            raise ApiError(200, "Login response did not include a token")
        return self.user

    def refresh(self) -> Optional[Dict[str, Any]]:
        if not self.token:
            return None
        data = self.request("GET", "/api/auth/me")
        self.user = (data or {}).get("user")
        return self.user

    def logout(self) -> None:
        if self.token:
            try:
                self.request("POST", "/api/auth/logout")
            except ApiError as e:
                logger.warning(f"Logout request failed: {e}")
        self.token = None
        self.user = None
