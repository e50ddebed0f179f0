# backend/utils/uploads.py
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings
from utils.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp"}
URL_PREFIX = "/uploads/"


def upload_dir() -> Path:
    path = Path(settings.UPLOAD_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path


def check_image(file: UploadFile, field: str = "image") -> None:
    if file.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationFailed.single(field, "Invalid file type, expected JPEG, PNG or WebP")


def save_image(file: UploadFile) -> str:
    """Store an uploaded image under UPLOAD_DIR and return its public URL."""
    check_image(file)

    ext = (file.filename or "").rsplit(".", 1)[-1].lower() if "." in (file.filename or "") else "jpg"
    unique_filename = f"{uuid.uuid4()}.{ext}"
    save_path = upload_dir() / unique_filename
    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    finally:
        file.file.close()
    return f"{URL_PREFIX}{unique_filename}"


def remove_image(url: Optional[str]) -> None:
    """Delete a previously stored upload. Remote URLs (imports) are left alone."""
    if not url or not url.startswith(URL_PREFIX):
        return
    path = upload_dir() / url[len(URL_PREFIX):]
    if path.exists():
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("Could not remove upload %s: %s", path, e)
