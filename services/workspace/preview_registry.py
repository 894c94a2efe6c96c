"""Registry of preview handles served to the page."""

from __future__ import annotations

from typing import Dict, Iterable, Tuple
from uuid import uuid4


class PreviewRegistry:
	"""Hold preview images until their handle is explicitly released."""

	def __init__(self) -> None:
		self._previews: Dict[str, Tuple[bytes, str]] = {}

	def allocate(self, data: bytes, media_type: str = "image/png") -> str:
		"""Register preview bytes and return a new handle."""
		handle = uuid4().hex
		self._previews[handle] = (data, media_type)
		return handle

	def get(self, handle: str) -> Tuple[bytes, str]:
		"""Return `(bytes, media_type)` for a live handle or raise KeyError."""
		preview = self._previews.get(handle)
		if preview is None:
			raise KeyError(f"Preview {handle} not found")
		return preview

	def release(self, handle: str) -> None:
		"""Drop a handle; releasing an unknown handle is a no-op."""
		self._previews.pop(handle, None)

	def release_all(self, handles: Iterable[str]) -> None:
		for handle in list(handles):
			self.release(handle)

	def __contains__(self, handle: object) -> bool:
		return handle in self._previews

	def __len__(self) -> int:
		return len(self._previews)


def preview_url(handle: str) -> str:
	return f"/previews/{handle}"
