import io
import json

import pytest

from ledger import openai_http
from server.app import create_app
from server.config import ServerConfig

BASE_URL = "http://openai.test/v1"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None, reason="OK"):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else (json.dumps(payload) if payload is not None else "")
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeOpenAI:
    """Stands in for requests.post against the transcription and chat endpoints."""

    def __init__(self):
        self.transcript = "Spent $12.50 on coffee"
        self.reply = '{"amount":12.50,"category":"coffee","type":"expense"}'
        self.transcription_response = None
        self.completion_response = None
        self.transcription_hook = None
        self.completion_hook = None
        self.calls = []

    def post(self, url, headers=None, json=None, data=None, files=None, timeout=None):
        entry = {
            "url": url,
            "headers": headers,
            "json": json,
            "data": data,
            "files": files,
            "timeout": timeout,
        }
        self.calls.append(entry)

        if url.endswith("/audio/transcriptions"):
            name, fh = files["file"]
            content = fh.read()
            entry["upload"] = (name, content)
            if self.transcription_hook is not None:
                return self.transcription_hook(name, content)
            if self.transcription_response is not None:
                return self.transcription_response
            return FakeResponse(payload={"text": self.transcript})

        if url.endswith("/chat/completions"):
            if self.completion_hook is not None:
                return self.completion_hook(json)
            if self.completion_response is not None:
                return self.completion_response
            return FakeResponse(payload={
                "choices": [{"index": 0, "message": {"role": "assistant", "content": self.reply}}],
            })

        return FakeResponse(status_code=404, payload={"error": {"message": f"no route {url}"}}, reason="Not Found")

    def calls_to(self, suffix):
        return [c for c in self.calls if c["url"].endswith(suffix)]


@pytest.fixture
def fake_openai(monkeypatch):
    fake = FakeOpenAI()
    monkeypatch.setattr(openai_http.requests, "post", fake.post)
    return fake


@pytest.fixture
def config(tmp_path):
    return ServerConfig(
        openai_api_key="test-key",
        openai_base_url=BASE_URL,
        storage_root=tmp_path / "storage",
    )


@pytest.fixture
def app(config, fake_openai):
    app = create_app(config)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def audio_upload(content=b"ID3fake-mp3-bytes", filename="note.mp3", field="file"):
    return {field: (io.BytesIO(content), filename)}


@pytest.fixture
def upload():
    return audio_upload
