"""Controller for forwarding completion requests to OpenAI."""

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from services.openai.response_utils import serialize_response

LOGGER = logging.getLogger(__name__)

METHOD_NOT_ALLOWED = "Method not allowed"
GENERIC_ERROR = "Error processing your request"


def method_not_allowed() -> JSONResponse:
    """Return the 405 body used for every non-POST call."""
    return JSONResponse(status_code=405, content={"error": METHOD_NOT_ALLOWED}, headers={"Allow": "POST"})


async def forward_completion(request: Request) -> JSONResponse:
    """Pass the request body unmodified to chat completions and relay the reply.

    Any failure, including an unreadable body, is logged with its detail and
    answered with a generic 500 so downstream errors never reach the client.
    """
    try:
        payload: Any = await request.json()
        if not isinstance(payload, dict):
            raise TypeError(f"Completion payload must be a JSON object, got {type(payload).__name__}")
        openai_client = request.app.state.openai_client
        response = await openai_client.chat.completions.create(**payload)
        body = serialize_response(response)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        LOGGER.error("OpenAI API error: %s", exc)
        return JSONResponse(status_code=500, content={"error": GENERIC_ERROR})

    return JSONResponse(status_code=200, content=body)
