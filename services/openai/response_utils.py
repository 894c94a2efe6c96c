"""Utilities for serializing OpenAI responses."""

from typing import Any


def serialize_response(response: Any) -> Any:
    """Convert a response object into a JSON-serializable structure."""
    if isinstance(response, (dict, list)):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump(mode="json")
    if hasattr(response, "to_dict"):
        return response.to_dict()
    raise TypeError(f"Cannot serialize response of type {type(response).__name__}")
