import logging
import uuid
from typing import Optional

from .llm import TransactionExtractor
from .models import ExtractionResult
from .storage import UploadStore
from .stt import STT

logger = logging.getLogger(__name__)


class CoreService:
    def __init__(self, store: UploadStore, stt: STT, extractor: TransactionExtractor):
        self.store = store
        self.stt = stt
        self.extractor = extractor

    def handle_audio(self, file, request_id: Optional[str] = None) -> ExtractionResult:
        """Store an uploaded recording, transcribe it and extract a transaction."""
        request_id = request_id or uuid.uuid4().hex

        with self.store.stored(file, request_id) as path:
            transcript = self.stt.transcribe(path)

        logger.debug("Transcript for %s: %r", request_id, transcript)
        return self.extractor.extract(transcript)

    def status(self) -> dict:
        return {
            "transcription_model": self.stt.model_name,
            "completion_model": self.extractor.model,
        }
