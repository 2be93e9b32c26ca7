# backend/apis/uploads.py
import os
from typing import Optional

from fastapi import UploadFile

from pipeline.errors import InvalidInput
from pipeline.extractor import ensure_supported
from pipeline.orchestrator import UploadedDocument


def parse_positive_int(value: Optional[str], name: str, default: Optional[int] = None) -> int:
    if value is None or str(value).strip() == "":
        if default is None:
            raise InvalidInput(f"Missing required field '{name}'")
        return default
    try:
        number = int(str(value).strip())
    except ValueError:
        raise InvalidInput(f"'{name}' must be an integer") from None
    if number < 1:
        raise InvalidInput(f"'{name}' must be a positive integer")
    return number


def read_upload(upload: UploadFile, max_bytes: int) -> UploadedDocument:
    name = upload.filename or "uploaded"
    mime = ensure_supported(upload.content_type)

    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    if size > max_bytes:
        raise InvalidInput(f"{name} exceeds {max_bytes // (1024*1024)}MB limit")
    if size == 0:
        raise InvalidInput(f"{name} is empty")

    return UploadedDocument(content=upload.file.read(), mime_type=mime, filename=name, size=size)
