"""Workspace domain models for image description sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class SelectedFile:
	"""A file chosen in the picker, before it becomes an image entry."""

	filename: str
	content_type: str
	data: bytes


@dataclass
class ImageEntry:
	"""An uploaded image together with its preview handle."""

	id: str
	filename: str
	content_type: str
	data: bytes
	preview_handle: str


@dataclass
class ResultEntry:
	"""Generated description, keywords and token usage for one image."""

	image_id: str
	description: str
	keywords: List[str] = field(default_factory=list)
	tokens_used: int = 0


@dataclass
class Notification:
	"""Transient user-facing message returned alongside an action."""

	title: str
	description: str
	variant: str = "default"

	def to_dict(self) -> Dict[str, str]:
		return {"title": self.title, "description": self.description, "variant": self.variant}


@dataclass
class WorkspaceState:
	"""In-memory state backing one page of the generator UI.

	Results are keyed by image id so that removed or failed images can never
	shift another image's result.
	"""

	workspace_id: str
	images: List[ImageEntry] = field(default_factory=list)
	results: Dict[str, ResultEntry] = field(default_factory=dict)
	file_input: List[str] = field(default_factory=list)
	is_generating: bool = False

	def image_index(self, image_id: str) -> int:
		"""Return the position of an image or raise KeyError."""
		for index, image in enumerate(self.images):
			if image.id == image_id:
				return index
		raise KeyError(f"Image {image_id} not found")
