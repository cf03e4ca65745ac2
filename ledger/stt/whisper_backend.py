"""Thin wrapper around the hosted Whisper transcription endpoint."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import ErrorKind, ServiceError
from ..openai_http import OpenAIHttp

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "whisper-1"


class STT:
    """Sends a stored audio file to the speech-to-text API and returns its text."""

    def __init__(self, http: OpenAIHttp, model_name: str = DEFAULT_MODEL):
        self.http = http
        self.model_name = model_name

    def transcribe(self, audio_path: Path) -> str:
        audio_path = Path(audio_path)
        if not audio_path.exists():
            raise FileNotFoundError(audio_path)

        with audio_path.open("rb") as f:
            body = self.http.post(
                "audio/transcriptions",
                data={"model": self.model_name},
                files={"file": (audio_path.name, f)},
            )

        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise ServiceError(
                ErrorKind.PERMANENT,
                "transcription response had no text",
                self.http.service,
            )

        logger.info("Transcribed %s with '%s' (%d chars)", audio_path.name, self.model_name, len(text))
        return text


__all__ = ["STT"]
