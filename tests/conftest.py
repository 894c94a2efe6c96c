import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import create_app


def completion_body(content):
    """Shape of a chat completion as returned by the OpenAI SDK's model_dump()."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "model": "gpt-4o",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
        "usage": {"prompt_tokens": 100, "completion_tokens": 50, "total_tokens": 150},
    }


def image_urls(payload):
    urls = []
    for message in payload.get("messages") or []:
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, list):
            continue
        for part in content:
            if isinstance(part, dict) and part.get("type") == "image_url":
                urls.append(part["image_url"]["url"])
    return urls


class FakeCompletions:
    def __init__(self):
        self.calls = []
        self.outcomes = []
        self.failing_urls = set()
        self.default = completion_body("Description: A cat.\nKeywords: cat, pet, animal\nTokens used: 42")

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.failing_urls & set(image_urls(kwargs)):
            raise RuntimeError("image rejected upstream")
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeOpenAI:
    """Stands in for AsyncOpenAI; only `chat.completions.create` is used."""

    def __init__(self):
        self.completions = FakeCompletions()
        self.chat = type("Chat", (), {"completions": self.completions})()


def make_png(color=(200, 30, 30), size=(64, 48)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def client(monkeypatch, fake_openai):
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.delenv("PROXY_BASE_URL", raising=False)
    monkeypatch.delenv("MAX_IMAGES", raising=False)
    monkeypatch.delenv("GENERATION_CONCURRENCY", raising=False)
    app = create_app()
    with TestClient(app) as test_client:
        app.state.openai_client = fake_openai
        yield test_client


@pytest.fixture
def workspace_id(client):
    response = client.post("/api/workspaces")
    assert response.status_code == 200
    return response.json()["workspace_id"]


def upload_files(client, workspace_id, count, mode="replace"):
    files = [("files", (f"image{i}.png", make_png((i * 40, 10, 10)), "image/png")) for i in range(count)]
    return client.post(f"/api/workspaces/{workspace_id}/images", files=files, data={"mode": mode})
