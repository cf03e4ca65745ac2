import io
import json
import threading
from concurrent.futures import ThreadPoolExecutor

from conftest import FakeResponse


def test_same_filename_uploads_do_not_share_storage(app, fake_openai):
    # Both requests must be inside transcription at once, so both files exist together.
    barrier = threading.Barrier(2, timeout=5)
    seen_paths = []
    lock = threading.Lock()

    def transcribe(name, content):
        with lock:
            seen_paths.append(name)
        barrier.wait()
        return FakeResponse(payload={"text": content.decode()})

    def complete(payload):
        spoken = payload["messages"][1]["content"]
        reply = json.dumps({"amount": 1, "category": spoken, "type": "expense"})
        return FakeResponse(payload={"choices": [{"message": {"content": reply}}]})

    fake_openai.transcription_hook = transcribe
    fake_openai.completion_hook = complete

    def send(word):
        client = app.test_client()
        response = client.post(
            "/upload",
            data={"file": (io.BytesIO(word.encode()), "shared.mp3")},
            content_type="multipart/form-data",
        )
        return response.status_code, json.loads(response.get_json())["category"]

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(send, ["groceries", "rent"]))

    assert results == [(200, "groceries"), (200, "rent")]
    assert len(set(seen_paths)) == 2
    assert all(name != "shared.mp3" for name in seen_paths)
