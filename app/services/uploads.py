import logging
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from app.core.config import get_settings
from app.core.exceptions import BadRequestError

settings = get_settings()
logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


class UploadStorage:
    """Локальное хранилище изображений постов; в посте хранится только имя файла."""

    def __init__(self, upload_dir: str):
        self.upload_dir = Path(upload_dir)

    async def save(self, upload: UploadFile) -> str:
        extension = Path(upload.filename or "").suffix.lower()
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise BadRequestError("Only image files are allowed")

        filename = f"{uuid.uuid4().hex}{extension}"
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        content = await upload.read()
        async with aiofiles.open(self.upload_dir / filename, "wb") as f:
            await f.write(content)

        logger.info("Stored upload '%s' as %s (%d bytes)", upload.filename, filename, len(content))
        return filename


_storage: Optional[UploadStorage] = None


def get_upload_storage() -> UploadStorage:
    global _storage
    if _storage is None:
        _storage = UploadStorage(settings.UPLOAD_DIR)
    return _storage
