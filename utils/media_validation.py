"""Validation helpers for uploaded image files."""

import mimetypes

from fastapi import HTTPException, UploadFile

from models.workspace_models import SelectedFile

IMAGE_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".bmp",
    ".tif",
    ".tiff",
)


def resolve_image_type(upload: UploadFile) -> str:
    """Return the image MIME type of an upload, mirroring an `accept="image/*"` picker.

    The declared content type wins when it is an image type. When the client
    sends no usable content type, the filename extension is used instead.
    """
    if not upload.filename:
        raise HTTPException(status_code=400, detail="Image file must have a filename.")
    if upload.content_type and upload.content_type != "application/octet-stream":
        content_type = upload.content_type.lower().split(";", 1)[0].strip()
        if not content_type.startswith("image/"):
            raise HTTPException(status_code=415, detail=f"Unsupported image content type: {upload.content_type}")
        return content_type
    if not upload.filename.lower().endswith(IMAGE_EXTENSIONS):
        raise HTTPException(status_code=415, detail="Unsupported or missing image content type.")
    guessed, _ = mimetypes.guess_type(upload.filename)
    return guessed or "image/jpeg"


async def read_selected_file(upload: UploadFile) -> SelectedFile:
    """Validate and read one picked file, ensuring the upload is not empty."""
    content_type = resolve_image_type(upload)
    data = await upload.read()
    if not data:
        raise HTTPException(status_code=400, detail=f"Uploaded image {upload.filename} is empty.")
    return SelectedFile(filename=upload.filename, content_type=content_type, data=data)
