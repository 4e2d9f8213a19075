import io
import logging
from datetime import datetime
from typing import NamedTuple, Tuple

from bson import ObjectId
from fastapi import Depends, UploadFile
from gridfs.errors import NoFile

from app.database import get_fs_bucket
from app.utils.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}
ALLOWED_IMAGE_EXTENSIONS = (".jpeg", ".jpg", ".png", ".gif")
MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB


class ImageUpload(NamedTuple):
    contents: bytes
    filename: str
    content_type: str


async def read_image_upload(file: UploadFile) -> ImageUpload:
    """Read an uploaded image, enforcing type and size limits."""
    filename = file.filename or ""
    if file.content_type not in ALLOWED_IMAGE_TYPES or not filename.lower().endswith(ALLOWED_IMAGE_EXTENSIONS):
        raise ValidationFailed("Only image files are allowed!")

    contents = await file.read()
    if not contents:
        raise ValidationFailed("No file uploaded")
    if len(contents) > MAX_IMAGE_SIZE:
        raise ValidationFailed("File size exceeds 5MB limit")

    return ImageUpload(contents=contents, filename=filename, content_type=file.content_type)


class ImageStore:
    """Images kept in a GridFS bucket, served back through /api/images/{id}."""

    def __init__(self, fs_bucket):
        self.fs_bucket = fs_bucket

    async def upload(self, image: ImageUpload, folder: str) -> Tuple[str, str]:
        """Store the image and return (public URL, deletion handle)."""
        file_id = await self.fs_bucket.upload_from_stream(
            filename=f"{folder}/{image.filename}",
            source=io.BytesIO(image.contents),
            metadata={
                "content_type": image.content_type,
                "original_filename": image.filename,
                "folder": folder,
                "uploaded_at": datetime.utcnow()
            }
        )
        logger.info("Stored image %s in %s (%d bytes)", file_id, folder, len(image.contents))
        return f"/api/images/{file_id}", str(file_id)

    async def delete(self, image_id: str):
        await self.fs_bucket.delete(ObjectId(image_id))

    async def discard(self, image_id: str):
        """Best-effort delete of an image nothing references any more."""
        if not image_id:
            return
        try:
            await self.delete(image_id)
        except Exception:
            logger.warning("Failed to delete image %s", image_id, exc_info=True)

    async def open(self, image_id: str) -> Tuple[bytes, str]:
        if not ObjectId.is_valid(image_id):
            raise NotFound("Image not found")
        try:
            grid_out = await self.fs_bucket.open_download_stream(ObjectId(image_id))
        except NoFile:
            raise NotFound("Image not found")

        contents = await grid_out.read()
        metadata = grid_out.metadata or {}
        return contents, metadata.get("content_type", "application/octet-stream")


def get_image_store(fs_bucket=Depends(get_fs_bucket)) -> ImageStore:
    return ImageStore(fs_bucket)
