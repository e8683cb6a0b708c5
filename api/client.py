from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Iterable, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:5000"
DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """Raised for every failed call against the admin REST service."""

    def __init__(self, message: str | None, status: int | None = None, payload: Any = None):
        super().__init__(message or "Request failed")
        self.message = message
        self.status = status
        self.payload = payload

    @property
    def is_auth_error(self) -> bool:
        return self.status == 401


def _server_message(resp: requests.Response) -> Optional[str]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return None


def _clean_params(params: Dict[str, Any] | None) -> Dict[str, Any]:
    # empty scope/filter values are omitted, never sent as ""
    return {k: v for k, v in (params or {}).items() if v is not None and str(v).strip() != ""}


class ApiClient:
    """Thin JSON client over one requests.Session."""

    def __init__(self, base_url: str, token: str | None = None,
                 timeout: float | None = DEFAULT_TIMEOUT, session: requests.Session | None = None):
        self.base_url = (base_url or DEFAULT_API_BASE).rstrip("/")
        self.api_root = f"{self.base_url}/api"
        self.timeout = timeout if timeout else None
        self.session = session or requests.Session()
        self.token = token
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        return f"{self.api_root}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        logger.debug("API %s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("API %s %s failed: %s", method, path, exc)
            raise ApiError(None, None) from exc
        if resp.status_code >= 400:
            msg = _server_message(resp)
            if resp.status_code == 401:
                logger.warning("API %s %s: session expired or token missing", method, path)
            else:
                logger.warning("API %s %s -> %s %s", method, path, resp.status_code, msg or "")
            raise ApiError(msg, resp.status_code, payload=resp.text)
        return resp

    @staticmethod
    def _decode(resp: requests.Response):
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return None

    def get(self, path: str, params: Dict[str, Any] | None = None):
        return self._decode(self._request("GET", path, params=_clean_params(params)))

    def post(self, path: str, payload: Any = None):
        return self._decode(self._request("POST", path, json=payload))

    def put(self, path: str, payload: Any = None):
        return self._decode(self._request("PUT", path, json=payload))

    def delete(self, path: str):
        return self._decode(self._request("DELETE", path))

    def upload(self, path: str, files: Iterable[Tuple[str, bytes, str]], data: Dict[str, Any] | None = None,
               field: str = "files"):
        parts = [(field, (name, content, mime or "application/octet-stream")) for name, content, mime in files]
        form = {k: (json.dumps(v) if isinstance(v, (dict, list)) else ("" if v is None else str(v)))
                for k, v in (data or {}).items()}
        return self._decode(self._request("POST", path, data=form, files=parts))

    def download(self, path: str) -> bytes:
        return self._request("GET", path).content

    def info(self) -> dict:
        return {
            "base_url": self.base_url,
            "api_root": self.api_root,
            "timeout": self.timeout,
            "has_token": bool(self.token),
        }


_CLIENT: Optional[Any] = None
_CLIENT_INFO: Dict[str, Any] = {}


def _timeout_from_env() -> float | None:
    raw = (os.getenv("ADMIN_API_TIMEOUT") or "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        val = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid ADMIN_API_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT
    return val if val > 0 else None


def configure_client(url: str | None = None, *, token: str | None = None,
                     timeout: float | None = None, session: requests.Session | None = None) -> ApiClient:
    """Create the global client from explicit args or ADMIN_API_* env vars."""
    global _CLIENT, _CLIENT_INFO
    base = (url or os.getenv("ADMIN_API_BASE") or DEFAULT_API_BASE).strip()
    tok = token if token is not None else (os.getenv("ADMIN_API_TOKEN") or "").strip() or None
    tmo = timeout if timeout is not None else _timeout_from_env()
    client = ApiClient(base, token=tok, timeout=tmo, session=session)
    _CLIENT = client
    _CLIENT_INFO = client.info()
    logger.info("API client configured for %s", client.api_root)
    return client


def set_client(client) -> None:
    """Install any object exposing get/post/put/delete/upload/download."""
    global _CLIENT, _CLIENT_INFO
    _CLIENT = client
    info = getattr(client, "info", None)
    _CLIENT_INFO = info() if callable(info) else {"driver": type(client).__name__}


def get_client():
    if _CLIENT is None:
        raise RuntimeError("API client not configured. Call configure_client() first.")
    return _CLIENT


def describe_current_client() -> dict:
    return dict(_CLIENT_INFO)
