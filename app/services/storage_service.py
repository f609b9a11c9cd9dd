"""
Local file storage for payment receipts and event images
"""

import logging
import os
import time
from typing import Tuple

from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

RECEIPTS_DIR = "receipts"
EVENT_IMAGES_DIR = "events_profile"

CONTENT_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

class StorageService:
    """Stores uploads as ``{user_id}-{millis}{ext}`` and hands back a URL path"""

    @staticmethod
    def _validate_image(filename: str, file_content: bytes) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in settings.ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                f"Invalid file format. Allowed: {', '.join(settings.ALLOWED_IMAGE_EXTENSIONS)}"
            )
        if not file_content:
            raise ValidationError("Uploaded file is empty")
        if len(file_content) > settings.MAX_UPLOAD_SIZE:
            raise ValidationError(
                f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
            )
        return ext

    @staticmethod
    def _save(subdir: str, user_id: str, filename: str, file_content: bytes) -> str:
        ext = StorageService._validate_image(filename, file_content)

        upload_dir = os.path.join(settings.UPLOAD_DIR, subdir)
        os.makedirs(upload_dir, exist_ok=True)

        stored_name = f"{user_id}-{int(time.time() * 1000)}{ext}"
        with open(os.path.join(upload_dir, stored_name), 'wb') as f:
            f.write(file_content)

        logger.info(f"Stored {subdir} upload {stored_name} ({len(file_content)} bytes)")
        return stored_name

    @staticmethod
    def save_receipt(user_id: str, filename: str, file_content: bytes) -> str:
        """Save a payment receipt and return the URL it is served from"""
        stored_name = StorageService._save(RECEIPTS_DIR, user_id, filename, file_content)
        return f"/orders/receipts/{stored_name}"

    @staticmethod
    def save_event_image(user_id: str, filename: str, file_content: bytes) -> str:
        """Save an event cover image and return its public URL"""
        stored_name = StorageService._save(EVENT_IMAGES_DIR, user_id, filename, file_content)
        return f"/uploads/{EVENT_IMAGES_DIR}/{stored_name}"

    @staticmethod
    def uploader_of(filename: str) -> str:
        """User id a stored upload belongs to; ids may contain dashes, the timestamp never does"""
        stem = os.path.splitext(filename)[0]
        owner, _, millis = stem.rpartition("-")
        if not owner or not millis.isdigit():
            return ""
        return owner

    @staticmethod
    def read_receipt(filename: str) -> Tuple[bytes, str]:
        """Return the receipt bytes and their content type"""
        if ".." in filename or "/" in filename or "\\" in filename:
            raise ValidationError("Invalid filename")

        file_path = os.path.join(settings.UPLOAD_DIR, RECEIPTS_DIR, filename)
        if not os.path.isfile(file_path):
            raise NotFoundError("Receipt")

        with open(file_path, 'rb') as f:
            content = f.read()

        ext = os.path.splitext(filename)[1].lower()
        return content, CONTENT_TYPES.get(ext, "image/jpeg")
