# backend/pipeline/storage.py
import os
import pathlib
import uuid

from loguru import logger

from .errors import NotFound, PersistenceFailed
from .extractor import PDF_MIME


def file_type_tag(mime_type: str) -> str:
    """'application/pdf' -> 'pdf', 'image/png' -> 'png'."""
    return mime_type.split("/")[-1].lower()


def mime_for_file_type(tag: str) -> str:
    tag = (tag or "").lower()
    if tag == "pdf":
        return PDF_MIME
    return f"image/{tag}"


class DocumentStorage:
    """Uploaded files on local disk under <root>/<user_id>/<uuid><ext>."""

    def __init__(self, root: str) -> None:
        self.root = pathlib.Path(root)

    def _absolute(self, storage_path: str) -> pathlib.Path:
        path = (self.root / storage_path).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFound(f"Stored file '{storage_path}' not found")
        return path

    def save(self, user_id: int, filename: str, content: bytes) -> str:
        _, ext = os.path.splitext((filename or "").lower())
        relative = f"{user_id}/{uuid.uuid4().hex}{ext}"
        target = self.root / relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            logger.error(f"Could not store upload {filename}: {e}")
            raise PersistenceFailed(f"Could not store {filename}") from e
        logger.info(f"Stored upload {filename} as {relative} ({len(content)} bytes)")
        return relative

    def read(self, storage_path: str) -> bytes:
        path = self._absolute(storage_path)
        if not path.is_file():
            raise NotFound(f"Stored file '{storage_path}' not found")
        return path.read_bytes()

    def delete(self, storage_path: str) -> None:
        try:
            self._absolute(storage_path).unlink(missing_ok=True)
        except (OSError, NotFound) as e:
            logger.warning(f"Could not delete stored file {storage_path}: {e}")
