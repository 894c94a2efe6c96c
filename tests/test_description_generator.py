import asyncio
import json

import httpx
import pytest

from conftest import completion_body
from services.openai.description_generator import DescriptionGenerator, GenerationError


def make_generator(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://proxy.test")
    return DescriptionGenerator(client, model="gpt-4o", max_tokens=300)


def test_describe_posts_payload_and_parses_reply():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion_body("Description: A cat.\nKeywords: cat, pet\nTokens used: 9"))

    result = asyncio.run(make_generator(handler).describe(b"png-bytes", "image/png"))

    assert result == {"description": "A cat.", "keywords": ["cat", "pet"], "tokens_used": 9}
    assert seen["path"] == "/api/generate"
    assert seen["body"]["model"] == "gpt-4o"
    assert seen["body"]["max_tokens"] == 300
    image_part = seen["body"]["messages"][0]["content"][1]
    assert image_part["image_url"]["url"].startswith("data:image/png;base64,")


def test_non_success_status_raises():
    def handler(request):
        return httpx.Response(500, json={"error": "Error processing your request"})

    with pytest.raises(GenerationError, match="Failed to generate"):
        asyncio.run(make_generator(handler).describe(b"png-bytes", "image/png"))


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationError):
        asyncio.run(make_generator(handler).describe(b"png-bytes", "image/png"))


def test_malformed_completion_raises():
    def handler(request):
        return httpx.Response(200, json={"choices": []})

    with pytest.raises(GenerationError, match="could not be parsed"):
        asyncio.run(make_generator(handler).describe(b"png-bytes", "image/png"))
