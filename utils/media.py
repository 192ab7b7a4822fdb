"""
Media upload helpers:
- CloudinaryUploader pushes a local file to Cloudinary and returns the API response
- stash_upload / discard save an incoming werkzeug FileStorage to a temp folder
  and remove it again
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def discard(local_path: Optional[str]) -> None:
    """Remove a temp file if it is still there."""
    if local_path and os.path.exists(local_path):
        try:
            os.remove(local_path)
        except OSError:
            logger.warning("Could not remove temp file %s", local_path)


def stash_upload(file_storage, folder: str) -> Optional[str]:
    """Save an uploaded file under `folder` and return its path, or None if empty."""
    if file_storage is None or not file_storage.filename:
        return None
    os.makedirs(folder, exist_ok=True)
    name = secure_filename(file_storage.filename) or "upload"
    path = os.path.join(folder, f"{uuid.uuid4().hex}-{name}")
    file_storage.save(path)
    return path


class CloudinaryUploader:
    def __init__(self, cloud_name: str | None, api_key: str | None, api_secret: str | None):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    @classmethod
    def from_config(cls, config) -> "CloudinaryUploader":
        return cls(
            config.get("CLOUDINARY_CLOUD_NAME"),
            config.get("CLOUDINARY_API_KEY"),
            config.get("CLOUDINARY_API_SECRET"),
        )

    def upload(self, local_path: Optional[str]) -> Optional[Dict[str, Any]]:
        """Upload a local file; None when there is no file or the upload failed."""
        if not local_path or not os.path.exists(local_path):
            return None
        try:
            response = cloudinary.uploader.upload(local_path, resource_type="auto")
        except (CloudinaryError, OSError):
            logger.exception("Upload of %s failed", local_path)
            discard(local_path)
            return None
        logger.info("File uploaded successfully: %s", response.get("url"))
        return response
