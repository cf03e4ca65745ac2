"""Per-request storage for uploaded audio."""

from __future__ import annotations

import logging
import shutil
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import ErrorKind, UploadError

logger = logging.getLogger(__name__)

# Formats the transcription endpoint accepts.
ALLOWED_SUFFIXES = {".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm"}


def audio_suffix(filename: str) -> str:
    """Return the lower-cased extension of a client filename, or raise UploadError."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in ALLOWED_SUFFIXES:
        raise UploadError(
            f"unsupported audio format '{suffix or filename}'; expected one of {sorted(ALLOWED_SUFFIXES)}",
            kind=ErrorKind.FORMAT.value,
            http_status=415,
        )
    return suffix


class UploadStore:
    def __init__(self, root: Path, keep_files: bool = False, max_bytes: Optional[int] = None) -> None:
        self.root = Path(root)
        self.keep_files = keep_files
        self.max_bytes = max_bytes

    def path_for(self, request_id: str, suffix: str) -> Path:
        # Client filenames never become path components.
        return self.root / f"{request_id}-{uuid.uuid4().hex}{suffix}"

    @contextmanager
    def stored(self, upload, request_id: str) -> Iterator[Path]:
        """
        Copy a werkzeug FileStorage to a unique path and yield that path.

        The upload stream is closed once copied. Files larger than max_bytes are
        rejected with a 413 UploadError. The stored file is removed when the
        block exits unless keep_files is set.
        """
        path: Optional[Path] = None
        try:
            try:
                suffix = audio_suffix(upload.filename)
                self.root.mkdir(parents=True, exist_ok=True)
                path = self.path_for(request_id, suffix)
                with path.open("wb") as dst:
                    shutil.copyfileobj(upload.stream, dst)
                size = path.stat().st_size
                if self.max_bytes is not None and size > self.max_bytes:
                    raise UploadError(
                        f"audio file is {size} bytes; the limit is {self.max_bytes}",
                        kind="request_entity_too_large",
                        http_status=413,
                    )
            finally:
                upload.close()

            logger.debug("Stored upload '%s' at %s", upload.filename, path)
            yield path
        finally:
            if path is not None and not self.keep_files:
                path.unlink(missing_ok=True)


__all__ = ["ALLOWED_SUFFIXES", "UploadStore", "audio_suffix"]
