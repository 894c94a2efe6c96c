"""Utilities to build chat completion payloads for image description."""

import base64
from typing import Any, Dict, List

from services.openai.image_prompts import build_description_prompt


def to_image_data_url(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    """Convert raw image bytes into a data URL suitable for vision input."""
    if not image_bytes:
        raise ValueError("Image bytes are required.")
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type or 'image/jpeg'};base64,{encoded}"


def build_user_content(prompt: str, image_url: str) -> List[Dict[str, Any]]:
    """Compose the text instruction and the embedded image as one user message."""
    return [
        {"type": "text", "text": prompt},
        {"type": "image_url", "image_url": {"url": image_url}},
    ]


def build_completion_payload(image_url: str, *, model: str, max_tokens: int) -> Dict[str, Any]:
    """Build the request body forwarded by the proxy to the chat completions API."""
    return {
        "model": model,
        "messages": [
            {
                "role": "user",
                "content": build_user_content(build_description_prompt(), image_url),
            }
        ],
        "max_tokens": max_tokens,
    }
