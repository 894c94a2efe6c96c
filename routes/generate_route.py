"""FastAPI route for the completion proxy."""

from fastapi import APIRouter, Request

from controllers.generate_controller import forward_completion, method_not_allowed

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate", summary="Forward a chat completion request")
async def post_generate(request: Request):
    """Forward the JSON body verbatim to the completion service."""
    return await forward_completion(request)


@router.api_route("/generate", methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def reject_generate(request: Request):
    return method_not_allowed()
