"""
Image storage backends.

Uploads land either on local disk (served from /uploads) or in Cloudinary.
Both backends apply the same type and size checks before storing anything.
"""
import asyncio
import os
import time
import uuid
from typing import Optional

import aiofiles
import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from core.config import (
    ALLOWED_IMAGE_TYPES, MAX_UPLOAD_SIZE, STORAGE_BACKEND, UPLOAD_DIR,
    CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET, CLOUDINARY_FOLDER,
)
from core.errors import UploadError, UpstreamError
from core.logger import get_logger

logger = get_logger("storage")

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


async def read_image(file: UploadFile, max_size: int = MAX_UPLOAD_SIZE) -> bytes:
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise UploadError("Invalid file type", error="INVALID_FILE_TYPE")
    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise UploadError(
            f"File too large (max {max_size // (1024 * 1024)}MB)",
            error="LIMIT_FILE_SIZE",
        )
    if not content:
        raise UploadError("Uploaded file is empty", error="EMPTY_FILE")
    return content


def _file_name(file: UploadFile, field: str) -> str:
    ext = os.path.splitext(file.filename or "")[1].lower() or _EXTENSIONS.get(file.content_type, "")
    return f"{field}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}{ext}"


class LocalStorage:
    url_prefix = "/uploads"

    def __init__(self, root: str = UPLOAD_DIR, max_size: int = MAX_UPLOAD_SIZE):
        self.root = root
        self.max_size = max_size

    async def save(self, file: UploadFile, folder: str = "images") -> str:
        content = await read_image(file, self.max_size)
        directory = os.path.join(self.root, folder)
        os.makedirs(directory, exist_ok=True)
        name = _file_name(file, folder)
        try:
            async with aiofiles.open(os.path.join(directory, name), "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Could not write upload %s: %s", name, e)
            raise UpstreamError("File upload failed")
        return f"{self.url_prefix}/{folder}/{name}"

    async def delete(self, url: Optional[str]) -> bool:
        if not url or not url.startswith(self.url_prefix + "/"):
            return False
        relative = url[len(self.url_prefix) + 1:]
        path = os.path.normpath(os.path.join(self.root, relative))
        if not path.startswith(os.path.normpath(self.root) + os.sep) or not os.path.isfile(path):
            return False
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not delete %s: %s", path, e)
            return False
        return True


class CloudinaryStorage:
    def __init__(self, folder: str = CLOUDINARY_FOLDER, max_size: int = MAX_UPLOAD_SIZE):
        self.folder = folder
        self.max_size = max_size
        cloudinary.config(
            cloud_name=CLOUDINARY_CLOUD_NAME,
            api_key=CLOUDINARY_API_KEY,
            api_secret=CLOUDINARY_API_SECRET,
            secure=True,
        )

    async def save(self, file: UploadFile, folder: str = "images") -> str:
        content = await read_image(file, self.max_size)
        try:
            result = await asyncio.to_thread(
                cloudinary.uploader.upload,
                content,
                folder=f"{self.folder}/{folder}",
                resource_type="image",
                transformation=[{"width": 1000, "height": 1000, "crop": "limit"}],
            )
        except Exception as e:
            logger.error("Cloudinary upload failed: %s", e)
            raise UpstreamError("Image upload failed")
        return result["secure_url"]

    async def delete(self, url: Optional[str]) -> bool:
        public_id = self.public_id(url)
        if not public_id:
            return False
        try:
            await asyncio.to_thread(cloudinary.uploader.destroy, public_id)
        except Exception as e:
            logger.warning("Cloudinary delete failed for %s: %s", public_id, e)
            return False
        return True

    def public_id(self, url: Optional[str]) -> Optional[str]:
        # .../upload/v1712345/<folder>/<sub>/<name>.<ext> -> <folder>/<sub>/<name>
        if not url or "/upload/" not in url:
            return None
        path = url.split("/upload/", 1)[1]
        parts = path.split("/")
        if parts and parts[0].startswith("v") and parts[0][1:].isdigit():
            parts = parts[1:]
        if not parts:
            return None
        return os.path.splitext("/".join(parts))[0]


def get_storage():
    if STORAGE_BACKEND == "cloudinary":
        return CloudinaryStorage()
    return LocalStorage()
