from fastapi import APIRouter, HTTPException, Request

from controllers.image_controller import get_preview

router = APIRouter()


@router.get("/previews/{handle}")
async def get_image_preview(request: Request, handle: str):
	"""Return the PNG preview bytes for the specified preview handle."""
	try:
		return await get_preview(request, handle)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
