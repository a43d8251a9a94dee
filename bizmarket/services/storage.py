from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from ..config import settings

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class PhotoStorage:
    """Публичное файловое хранилище: root на диске, base_url для ссылок."""

    def __init__(self, root: str | Path, base_url: str = "/storage") -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def store(self, fileobj: BinaryIO, directory: str, filename: str) -> str:
        path = f"{directory.strip('/')}/{filename}"
        target = self.root / path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fileobj.seek(0)
            with target.open("wb") as out:
                shutil.copyfileobj(fileobj, out)
        except OSError as e:
            logger.error("failed to store %s: %s", path, e)
            raise StorageError(f"cannot store {path}") from e
        return path

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def delete(self, path: str) -> None:
        (self.root / path).unlink(missing_ok=True)


def get_photo_storage() -> PhotoStorage:
    return PhotoStorage(settings.MEDIA_ROOT, settings.MEDIA_URL)
