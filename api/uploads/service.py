"""
Upload "service layer".

Validates image uploads coming through FastAPI and moves them into blob
storage via `storage.py`, turning its sentinels into API errors.
"""

from __future__ import annotations

import logging

from fastapi import UploadFile

from core import errors
from core.config import env_int

from . import storage

MAX_IMAGES_PER_PLACE = 3
DEFAULT_MAX_IMAGE_BYTES = 15 * 1024 * 1024  # 15 MiB

logger = logging.getLogger(__name__)


def max_image_bytes() -> int:
    value = env_int("MAX_IMAGE_BYTES", DEFAULT_MAX_IMAGE_BYTES)
    return value if value > 0 else DEFAULT_MAX_IMAGE_BYTES


def validate_image(file: UploadFile) -> str:
    """
    Return the upload's content type if it is an image.
    """
    content_type = (file.content_type or "").strip().lower()
    if not content_type.startswith("image/") or content_type == "image/":
        raise errors.ValidationError(
            f"Unsupported file type '{content_type or 'unknown'}'. Only images are accepted."
        )
    return content_type


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise errors.ValidationError(
                f"File too large. Max is {max_bytes} bytes.",
                status_code=413,
            )

    if not buf:
        raise errors.ValidationError(f"Empty file: {file.filename or 'upload'}.")
    return bytes(buf)


async def store_image(file: UploadFile, *, folder: str) -> str:
    content_type = validate_image(file)
    data = await read_upload_bytes(file, max_bytes=max_image_bytes())

    path = await storage.upload(data, content_type, folder)
    if path is None:
        raise errors.StorageError("Unexpected error while uploading the image.")
    return path


async def store_images(files: list[UploadFile], *, folder: str) -> list[str]:
    """
    Upload a batch of images; either all are stored or none are kept.
    """
    if len(files) > MAX_IMAGES_PER_PLACE:
        raise errors.ValidationError(f"At most {MAX_IMAGES_PER_PLACE} images are allowed.")

    # Validate everything before touching storage.
    for file in files:
        validate_image(file)

    paths: list[str] = []
    try:
        for file in files:
            paths.append(await store_image(file, folder=folder))
    except errors.AppError:
        await discard(paths)
        raise
    return paths


async def discard(paths: list[str] | None) -> None:
    """
    Best-effort removal of stored objects; failures are only logged.
    """
    for path in paths or []:
        if not await storage.delete(path):
            logger.warning("discard_failed key=%s", path)


async def signed_url(path: str) -> str:
    path = (path or "").strip()
    if not path:
        raise errors.ValidationError("Missing required data: path.")
    url = await storage.get_signed_url(path)
    if url is None:
        raise errors.StorageError("Unexpected error while signing the image URL.")
    return url
