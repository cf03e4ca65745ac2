from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..errors import ErrorKind, ServiceError
from ..models import ExtractionResult, ExtractionStatus, parse_transaction
from .openai_client import DEFAULT_MODEL, ChatClient

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
SCHEMA_PATH = BASE_DIR / "schema.json"


def load_schema(path: Optional[Path] = None) -> str:
    with (path or SCHEMA_PATH).open("r", encoding="utf-8") as f:
        return f.read().strip()


def build_prompt(schema: str) -> str:
    return (
        "You are a helpful assistant extracting a personal transaction from text. "
        "From the given text, create a valid JSON representation that strictly follows this schema:\n\n"
        + schema + "\n\n"
        "If no transaction can be found return an empty string. Omit null fields. Return JSON only. "
        "The JSON object:\n\n"
    )


class TransactionExtractor:
    """Asks the chat model for a Transaction describing a transcript."""

    def __init__(
        self,
        client: ChatClient,
        prompt: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2000,
        temperature: float = 1.0,
    ) -> None:
        self.client = client
        self.prompt = prompt
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    def messages(self, text: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.prompt},
            {"role": "user", "content": text},
        ]

    def extract(self, text: str) -> ExtractionResult:
        candidates = self.client.complete(
            self.messages(text),
            model=self.model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            n=1,
            stop=None,
        )
        if not candidates:
            raise ServiceError(
                ErrorKind.PERMANENT,
                "completion returned no candidates",
                self.client.http.service,
            )

        reply = candidates[0]
        logger.debug("Completion reply: %r", reply)

        transaction, status = parse_transaction(reply)
        if status is ExtractionStatus.MALFORMED:
            logger.warning("Model reply was not a well-formed transaction: %r", reply[:200])
        elif status is ExtractionStatus.EMPTY:
            logger.info("No transaction found in transcript")

        return ExtractionResult(
            transaction=transaction,
            status=status,
            transcript=text,
            raw_reply=reply,
        )


__all__ = ["TransactionExtractor", "build_prompt", "load_schema"]
