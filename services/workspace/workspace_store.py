"""Simple in-memory store for generator workspaces."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence
from uuid import uuid4

from models.workspace_models import ImageEntry, ResultEntry, SelectedFile, WorkspaceState
from services.thumbnail_generator import ThumbnailGenerator
from services.workspace.preview_registry import PreviewRegistry


class TooManyImagesError(ValueError):
	"""Raised when a selection would exceed the configured image limit."""

	def __init__(self, max_images: int) -> None:
		super().__init__(f"You can only upload a maximum of {max_images} images.")
		self.max_images = max_images


class WorkspaceBusyError(RuntimeError):
	"""Raised when generation is requested while one is already running."""


class WorkspaceStore:
	"""Manage workspaces, their image entries, previews and results."""

	def __init__(
		self,
		previews: PreviewRegistry,
		thumbnails: Optional[ThumbnailGenerator] = None,
		max_images: int = 5,
	) -> None:
		self.previews = previews
		self.thumbnails = thumbnails or ThumbnailGenerator()
		self.max_images = max_images
		self._workspaces: Dict[str, WorkspaceState] = {}

	def create(self) -> WorkspaceState:
		"""Create a new empty workspace."""
		workspace_id = uuid4().hex
		state = WorkspaceState(workspace_id=workspace_id)
		self._workspaces[workspace_id] = state
		return state

	def get(self, workspace_id: str) -> WorkspaceState:
		"""Return a workspace or raise KeyError if missing."""
		state = self._workspaces.get(workspace_id)
		if state is None:
			raise KeyError(f"Workspace {workspace_id} not found")
		return state

	def discard(self, workspace_id: str) -> None:
		"""Forget a workspace and release every preview it holds."""
		state = self.get(workspace_id)
		self.previews.release_all(image.preview_handle for image in state.images)
		del self._workspaces[workspace_id]

	def select_images(self, workspace_id: str, files: Sequence[SelectedFile], append: bool = False) -> WorkspaceState:
		"""Replace (or extend) the image list with a new selection.

		The selection is applied all-or-nothing: on any error no preview stays
		allocated and the workspace is left exactly as it was.
		"""
		state = self.get(workspace_id)
		total = len(files) + (len(state.images) if append else 0)
		if total > self.max_images:
			raise TooManyImagesError(self.max_images)

		new_entries: List[ImageEntry] = []
		try:
			for selected in files:
				preview = self.thumbnails.create_thumbnail(selected.data)
				new_entries.append(
					ImageEntry(
						id=uuid4().hex,
						filename=selected.filename,
						content_type=selected.content_type,
						data=selected.data,
						preview_handle=self.previews.allocate(preview, "image/png"),
					)
				)
		except Exception:
			self.previews.release_all(entry.preview_handle for entry in new_entries)
			raise

		if append:
			state.images.extend(new_entries)
			state.file_input = state.file_input + [entry.filename for entry in new_entries]
		else:
			self.previews.release_all(image.preview_handle for image in state.images)
			state.images = new_entries
			state.file_input = [entry.filename for entry in new_entries]
		# Results no longer describe the current selection.
		state.results = {}
		return state

	def remove_image(self, workspace_id: str, image_id: str) -> WorkspaceState:
		"""Remove one image and its result, releasing its preview."""
		state = self.get(workspace_id)
		index = state.image_index(image_id)
		return self.remove_image_at(workspace_id, index)

	def remove_image_at(self, workspace_id: str, index: int) -> WorkspaceState:
		"""Remove the image at a position; raise IndexError when out of range."""
		state = self.get(workspace_id)
		if index < 0 or index >= len(state.images):
			raise IndexError(f"No image at index {index}")
		image = state.images.pop(index)
		state.results.pop(image.id, None)
		self.previews.release(image.preview_handle)
		return state

	def clear(self, workspace_id: str) -> WorkspaceState:
		"""Drop every image and result and reset the file input."""
		state = self.get(workspace_id)
		self.previews.release_all(image.preview_handle for image in state.images)
		state.images = []
		state.results = {}
		state.file_input = []
		return state

	def begin_generation(self, workspace_id: str) -> List[ImageEntry]:
		"""Flip the workspace to generating and return the images to process."""
		state = self.get(workspace_id)
		if state.is_generating:
			raise WorkspaceBusyError(f"Workspace {workspace_id} is already generating")
		if not state.images:
			raise ValueError("Select at least one image before generating.")
		state.is_generating = True
		return list(state.images)

	def finish_generation(self, workspace_id: str, results: Optional[Dict[str, ResultEntry]] = None) -> Optional[WorkspaceState]:
		"""Store a run's results for images still present and return to idle.

		Returns None when the workspace was discarded while generating.
		"""
		state = self._workspaces.get(workspace_id)
		if state is None:
			return None
		if results is not None:
			present = {image.id for image in state.images}
			state.results = {image_id: result for image_id, result in results.items() if image_id in present}
		state.is_generating = False
		return state
