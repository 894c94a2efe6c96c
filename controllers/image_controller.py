from fastapi import HTTPException, Request
from fastapi.responses import Response

from services.workspace.preview_registry import PreviewRegistry


async def get_preview(request: Request, handle: str) -> Response:
    """Controller to fetch the preview bytes behind a preview handle.

    Args:
        request: FastAPI Request (to access app.state.preview_registry).
        handle: Preview handle allocated when the image was selected.

    Returns:
        FastAPI `Response` with the raw preview bytes and their media type.

    Raises:
        HTTPException(404) if the handle was never allocated or has been released.
    """
    registry: PreviewRegistry = request.app.state.preview_registry
    try:
        data, media_type = registry.get(handle)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Preview not found") from exc
    return Response(content=data, media_type=media_type, headers={"Cache-Control": "no-store"})
