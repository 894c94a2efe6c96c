"""FastAPI routes for generator workspaces."""

from typing import List, Literal

from fastapi import APIRouter, File, Form, HTTPException, Query, Request, UploadFile
from pydantic import BaseModel

from controllers.workspace_controller import (
	clear_all,
	copy_text,
	create_workspace,
	discard_workspace,
	generate,
	get_workspace,
	remove_image,
	select_images,
)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


class CopyPayload(BaseModel):
	image_id: str
	field: Literal["description", "keywords"]


@router.post("")
async def create_workspace_route(request: Request):
	try:
		return await create_workspace(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{workspace_id}")
async def get_workspace_route(request: Request, workspace_id: str):
	try:
		return await get_workspace(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{workspace_id}")
async def discard_workspace_route(request: Request, workspace_id: str):
	try:
		return await discard_workspace(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/images", summary="Select images for a workspace")
async def select_images_route(
	request: Request,
	workspace_id: str,
	files: List[UploadFile] = File(...),
	mode: str = Form("replace"),
):
	"""Replace (or append to) the workspace's images with the picked files."""
	try:
		return await select_images(request, workspace_id, files, mode)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{workspace_id}/images/{image_id}")
async def remove_image_route(request: Request, workspace_id: str, image_id: str):
	try:
		return await remove_image(request, workspace_id, image_id=image_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{workspace_id}/images")
async def remove_image_at_route(request: Request, workspace_id: str, index: int = Query(..., ge=0)):
	try:
		return await remove_image(request, workspace_id, index=index)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/generate")
async def generate_route(request: Request, workspace_id: str):
	try:
		return await generate(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/clear")
async def clear_route(request: Request, workspace_id: str):
	try:
		return await clear_all(request, workspace_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{workspace_id}/copy")
async def copy_route(request: Request, workspace_id: str, payload: CopyPayload):
	try:
		return await copy_text(request, workspace_id, payload.image_id, payload.field)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
