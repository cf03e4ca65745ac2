from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    QUOTA = "quota"
    FORMAT = "format"


# HTTP status the server answers with for each kind of upstream failure.
HTTP_STATUS_BY_KIND = {
    ErrorKind.TRANSIENT: 503,
    ErrorKind.QUOTA: 429,
    ErrorKind.FORMAT: 415,
    ErrorKind.PERMANENT: 502,
}


class ConfigError(ValueError):
    """Raised at startup when the server cannot be configured."""


class UploadError(ValueError):
    """The request did not carry a usable audio upload."""

    def __init__(self, message: str, kind: str = "bad_request", http_status: int = 400) -> None:
        super().__init__(message)
        self.kind = kind
        self.http_status = http_status


class ServiceError(RuntimeError):
    """A call to the transcription or completion service failed."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        service: str = "openai",
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.service = service
        self.status_code = status_code

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{self.service} {self.kind.value} error ({self.status_code}): {base}"
        return f"{self.service} {self.kind.value} error: {base}"


__all__ = [
    "ConfigError",
    "ErrorKind",
    "HTTP_STATUS_BY_KIND",
    "ServiceError",
    "UploadError",
]
