import logging
import os
import shutil
import uuid
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from settings import settings

logger = logging.getLogger(__name__)

cloudinary.config(
    cloud_name=settings.cloudinary_cloud_name,
    api_key=settings.cloudinary_api_key,
    api_secret=settings.cloudinary_api_secret,
)


def save_upload(file: UploadFile) -> str:
    """Write a multipart upload into the local temp directory and return its path."""
    os.makedirs(settings.upload_temp_dir, exist_ok=True)
    ext = os.path.splitext(file.filename or "")[1]
    path = os.path.join(settings.upload_temp_dir, f"{uuid.uuid4().hex}{ext}")
    with open(path, "wb") as f:
        shutil.copyfileobj(file.file, f)
    return path


def upload_on_cloudinary(local_file_path: Optional[str]) -> Optional[Dict[str, Any]]:
    """Upload a local file to Cloudinary; single attempt.

    Returns the Cloudinary response (``url``, ``secure_url``, ``duration``...)
    or None. The local file is removed once the attempt is over, whatever its
    outcome.
    """
    if not local_file_path:
        return None
    try:
        response = cloudinary.uploader.upload(
            local_file_path,
            resource_type="auto",
            folder=settings.cloudinary_folder,
        )
    except Exception as e:
        logger.warning("Upload of %s to cloudinary failed: %s", local_file_path, e)
        return None
    finally:
        if os.path.exists(local_file_path):
            os.remove(local_file_path)
    logger.info("File is uploaded on cloudinary %s", response.get("url"))
    return response
