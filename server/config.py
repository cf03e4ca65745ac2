"""Configuration helpers for the voice-ledger server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from ledger.errors import ConfigError

RESPONSE_ENCODINGS = {"string", "object"}

_TRUTHY = {"1", "true", "yes", "on"}


def _default_storage_root() -> Path:
    return Path(__file__).resolve().parent / "uploads"


@dataclass(frozen=True)
class ServerConfig:
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"

    transcription_model: str = "whisper-1"
    completion_model: str = "gpt-3.5-turbo"
    completion_max_tokens: int = 2000
    completion_temperature: float = 1.0

    http_timeout_seconds: float = 60.0

    # Storage path for uploaded audio
    storage_root: Path = field(default_factory=_default_storage_root)
    keep_uploads: bool = False
    max_upload_bytes: int = 25 * 1024 * 1024

    # "string": the body is a JSON string literal holding the record's JSON
    response_encoding: str = "string"
    cors_origins: tuple[str, ...] = ("*",)

    host: str = "0.0.0.0"
    port: int = 1323
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Construct from os.environ with sensible defaults."""

        try:
            return cls(
                openai_api_key=os.getenv("OPENAI_API_KEY", ""),
                openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
                transcription_model=os.getenv("TRANSCRIPTION_MODEL", "whisper-1"),
                completion_model=os.getenv("COMPLETION_MODEL", "gpt-3.5-turbo"),
                completion_max_tokens=int(os.getenv("COMPLETION_MAX_TOKENS", "2000")),
                completion_temperature=float(os.getenv("COMPLETION_TEMPERATURE", "1")),
                http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "60")),
                storage_root=Path(os.getenv("LEDGER_STORAGE", str(_default_storage_root()))),
                keep_uploads=os.getenv("KEEP_UPLOADS", "false").strip().lower() in _TRUTHY,
                max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(25 * 1024 * 1024))),
                response_encoding=os.getenv("RESPONSE_ENCODING", "string").strip().lower(),
                cors_origins=tuple(
                    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
                ),
                host=os.getenv("LEDGER_HOST", "0.0.0.0"),
                port=int(os.getenv("LEDGER_PORT", "1323")),
                log_level=os.getenv("LOG_LEVEL", "INFO"),
            )
        except ValueError as exc:
            raise ConfigError(f"invalid numeric setting: {exc}") from exc

    def validate(self) -> None:
        if not self.openai_api_key:
            raise ConfigError("api key not found: set OPENAI_API_KEY")
        if self.response_encoding not in RESPONSE_ENCODINGS:
            raise ConfigError(f"response_encoding must be one of {sorted(RESPONSE_ENCODINGS)}")
        if self.completion_max_tokens <= 0:
            raise ConfigError("completion_max_tokens must be > 0")
        if self.http_timeout_seconds <= 0:
            raise ConfigError("http_timeout_seconds must be > 0")
        if self.max_upload_bytes <= 0:
            raise ConfigError("max_upload_bytes must be > 0")
        if not (0 < self.port < 65536):
            raise ConfigError("port must be between 1 and 65535")

    @property
    def incoming_dir(self) -> Path:
        return self.storage_root / "incoming"

    def ensure_directories(self) -> None:
        self.incoming_dir.mkdir(parents=True, exist_ok=True)


__all__ = ["ServerConfig"]
