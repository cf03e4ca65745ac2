"""Shared request plumbing for the OpenAI REST endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from .errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"

_TRANSIENT_STATUSES = {408, 409}
_FORMAT_STATUSES = {413, 415}
_FORMAT_HINTS = ("file format", "unsupported", "invalid file", "could not be decoded", "too large")


class OpenAIHttp:
    """Posts to one OpenAI-compatible API root and classifies failures."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        service: str = "openai",
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.service = service

    def post(
        self,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = requests.post(
                url,
                headers=self._headers(),
                json=json,
                data=data,
                files=files,
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise ServiceError(ErrorKind.TRANSIENT, f"timed out calling {url}", self.service) from exc
        except requests.RequestException as exc:
            raise ServiceError(ErrorKind.TRANSIENT, f"request to {url} failed: {exc}", self.service) from exc

        if not resp.ok:
            raise self._classify(resp)

        try:
            return resp.json()
        except ValueError as exc:
            raise ServiceError(
                ErrorKind.PERMANENT,
                "response body was not JSON",
                self.service,
                resp.status_code,
            ) from exc

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _classify(self, resp: requests.Response) -> ServiceError:
        status = resp.status_code
        message = _error_message(resp)

        if status == 429:
            kind = ErrorKind.QUOTA
        elif status >= 500 or status in _TRANSIENT_STATUSES:
            kind = ErrorKind.TRANSIENT
        elif status in _FORMAT_STATUSES:
            kind = ErrorKind.FORMAT
        elif status == 400 and any(hint in message.lower() for hint in _FORMAT_HINTS):
            kind = ErrorKind.FORMAT
        else:
            kind = ErrorKind.PERMANENT

        logger.debug("%s answered %s (%s): %s", self.service, status, kind.value, message)
        return ServiceError(kind, message, self.service, status)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or resp.reason or "").strip() or f"HTTP {resp.status_code}"

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error
    return f"HTTP {resp.status_code}"


__all__ = ["DEFAULT_BASE_URL", "OpenAIHttp"]
