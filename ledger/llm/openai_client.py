from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..errors import ErrorKind, ServiceError
from ..openai_http import OpenAIHttp

DEFAULT_MODEL = "gpt-3.5-turbo"


class ChatClient:
    def __init__(self, http: OpenAIHttp) -> None:
        self.http = http

    def complete(
        self,
        messages: List[Dict[str, str]],
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2000,
        temperature: float = 1.0,
        n: int = 1,
        stop: Optional[List[str]] = None,
    ) -> List[str]:
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "n": n,
        }
        if stop:
            payload["stop"] = stop

        response = self.http.post("chat/completions", json=payload)
        return self._candidates(response)

    def _candidates(self, response: Dict[str, Any]) -> List[str]:
        choices = response.get("choices") if isinstance(response, dict) else None
        if not isinstance(choices, list):
            raise ServiceError(
                ErrorKind.PERMANENT,
                "completion response had no choices",
                self.http.service,
            )

        contents: List[str] = []
        for choice in choices:
            message = choice.get("message") if isinstance(choice, dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            contents.append(content or "")
        return contents


__all__ = ["ChatClient"]
