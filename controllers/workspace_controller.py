"""Workspace lifecycle helpers for the image description page."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from fastapi import HTTPException, Request, UploadFile

from models.workspace_models import Notification, ResultEntry, WorkspaceState
from services.openai.description_generator import DescriptionGenerator
from services.workspace.preview_registry import preview_url
from services.workspace.workspace_store import TooManyImagesError, WorkspaceBusyError, WorkspaceStore
from utils.media_validation import read_selected_file

LOGGER = logging.getLogger(__name__)

COPY_FIELDS = ("description", "keywords")


def _store(request: Request) -> WorkspaceStore:
	return request.app.state.workspace_store


def _get_state(store: WorkspaceStore, workspace_id: str) -> WorkspaceState:
	try:
		return store.get(workspace_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


def render_workspace(state: WorkspaceState, notifications: Optional[Sequence[Notification]] = None) -> Dict[str, Any]:
	"""Build the view model the page renders: previews, the result table and flags."""
	rows: List[Dict[str, Any]] = []
	for image in state.images:
		result = state.results.get(image.id)
		if result is None:
			continue
		rows.append(
			{
				"image_id": image.id,
				"preview_url": preview_url(image.preview_handle),
				"description": result.description,
				"description_chars": len(result.description),
				"description_words": len(result.description.split()),
				"keywords": list(result.keywords),
				"keyword_count": len(result.keywords),
				"tokens_used": result.tokens_used,
			}
		)

	return {
		"workspace_id": state.workspace_id,
		"is_generating": state.is_generating,
		"can_generate": bool(state.images) and not state.is_generating,
		"file_input": {"value": ", ".join(state.file_input), "files": list(state.file_input)},
		"images": [
			{"id": image.id, "filename": image.filename, "preview_url": preview_url(image.preview_handle)}
			for image in state.images
		],
		"rows": rows,
		"notifications": [notification.to_dict() for notification in notifications or []],
	}


async def create_workspace(request: Request) -> Dict[str, Any]:
	"""Create a new empty workspace and return its view."""
	state = _store(request).create()
	return render_workspace(state)


async def get_workspace(request: Request, workspace_id: str) -> Dict[str, Any]:
	return render_workspace(_get_state(_store(request), workspace_id))


async def discard_workspace(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Forget a workspace, releasing its previews."""
	store = _store(request)
	try:
		store.discard(workspace_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"workspace_id": workspace_id, "discarded": True}


async def select_images(
	request: Request,
	workspace_id: str,
	files: Sequence[UploadFile],
	mode: str = "replace",
) -> Dict[str, Any]:
	"""Apply a file-picker selection; any rejection leaves the workspace untouched."""
	if mode not in ("replace", "append"):
		raise HTTPException(status_code=400, detail=f"Unsupported selection mode: {mode}")

	store = _store(request)
	state = _get_state(store, workspace_id)
	incoming = len(files) + (len(state.images) if mode == "append" else 0)
	if incoming > store.max_images:
		raise HTTPException(status_code=400, detail=str(TooManyImagesError(store.max_images)))

	selected = [await read_selected_file(upload) for upload in files]
	try:
		state = store.select_images(workspace_id, selected, append=mode == "append")
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	return render_workspace(state)


async def remove_image(
	request: Request,
	workspace_id: str,
	image_id: Optional[str] = None,
	index: Optional[int] = None,
) -> Dict[str, Any]:
	"""Remove an image and its result, by id or by position."""
	store = _store(request)
	_get_state(store, workspace_id)
	try:
		if image_id is not None:
			state = store.remove_image(workspace_id, image_id)
		elif index is not None:
			state = store.remove_image_at(workspace_id, index)
		else:
			raise HTTPException(status_code=400, detail="An image id or index is required.")
	except (KeyError, IndexError) as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return render_workspace(state)


async def clear_all(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Drop every image and result and reset the file input."""
	store = _store(request)
	_get_state(store, workspace_id)
	return render_workspace(store.clear(workspace_id))


async def generate(request: Request, workspace_id: str) -> Dict[str, Any]:
	"""Describe every image in the workspace.

	Images go through a bounded pool (one at a time by default). A failed image
	produces a notification and no result row; the others carry on.
	"""
	store = _store(request)
	_get_state(store, workspace_id)
	try:
		images = store.begin_generation(workspace_id)
	except WorkspaceBusyError as exc:
		raise HTTPException(status_code=409, detail="Generation is already in progress.") from exc
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc

	settings = request.app.state.settings
	generator = DescriptionGenerator(
		request.app.state.proxy_client,
		model=settings.openai_model,
		max_tokens=settings.max_output_tokens,
	)
	semaphore = asyncio.Semaphore(settings.generation_concurrency)
	results: Dict[str, ResultEntry] = {}
	notifications: List[Notification] = []

	async def _describe(image) -> None:
		async with semaphore:
			try:
				parsed = await generator.describe(image.data, image.content_type)
			except Exception as exc:  # pylint: disable=broad-exception-caught
				LOGGER.error("Error processing image %s: %s", image.filename, exc)
				notifications.append(
					Notification(
						title="Error",
						description="Failed to process image. Please try again.",
						variant="destructive",
					)
				)
				return
			results[image.id] = ResultEntry(image_id=image.id, **parsed)

	try:
		await asyncio.gather(*(_describe(image) for image in images))
	except BaseException:
		store.finish_generation(workspace_id)
		raise

	state = store.finish_generation(workspace_id, results)
	if state is None:
		raise HTTPException(status_code=404, detail=f"Workspace {workspace_id} not found")
	LOGGER.info("Generated %d of %d results for workspace %s", len(results), len(images), workspace_id)
	return render_workspace(state, notifications)


async def copy_text(request: Request, workspace_id: str, image_id: str, field: str) -> Dict[str, Any]:
	"""Return the text the page should place on the clipboard."""
	if field not in COPY_FIELDS:
		raise HTTPException(status_code=400, detail=f"Field must be one of: {', '.join(COPY_FIELDS)}")
	state = _get_state(_store(request), workspace_id)
	result = state.results.get(image_id)
	if result is None:
		raise HTTPException(status_code=404, detail=f"No result for image {image_id}")

	text = result.description if field == "description" else ", ".join(result.keywords)
	notification = Notification(title="Copied", description="Text copied to clipboard")
	return {"text": text, "notifications": [notification.to_dict()]}
