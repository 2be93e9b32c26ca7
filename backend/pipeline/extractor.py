# backend/pipeline/extractor.py
import io
from typing import List, Optional
from urllib.parse import unquote

import pdfplumber
from loguru import logger

from .errors import ExtractionFailed, UnsupportedFormat
from .vision import VisionDescriber

PDF_MIME = "application/pdf"


def is_supported_mime(mime_type: Optional[str]) -> bool:
    mime = (mime_type or "").lower()
    return mime == PDF_MIME or mime.startswith("image/")


def ensure_supported(mime_type: Optional[str]) -> str:
    if not is_supported_mime(mime_type):
        raise UnsupportedFormat(f"Unsupported file type '{mime_type}'. Use a PDF or an image.")
    return mime_type.lower()


def _page_runs(page) -> List[str]:
    # use_text_flow keeps the content-stream order instead of re-sorting by position
    words = page.extract_words(use_text_flow=True, keep_blank_chars=False)
    runs = []
    for w in words:
        text = unquote(w.get("text") or "")
        if text:
            runs.append(text)
    return runs


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Runs joined by spaces within a page, pages joined by newlines."""
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            pages = [" ".join(_page_runs(p)) for p in pdf.pages]
    except Exception as e:
        logger.error(f"PDF decomposition failed: {type(e).__name__}: {e}")
        raise ExtractionFailed(f"Could not read PDF: {type(e).__name__}") from e
    return "\n".join(pages)


class ContentExtractor:
    def __init__(self, describer: VisionDescriber) -> None:
        self.describer = describer

    def extract_text(self, file_bytes: bytes, declared_mime_type: str) -> str:
        mime = ensure_supported(declared_mime_type)
        if mime == PDF_MIME:
            text = extract_pdf_text(file_bytes)
            logger.info(f"Extracted {len(text)} characters from PDF")
            return text
        # a vision description stands in for OCR output downstream
        return self.describer.describe_image(file_bytes, mime)
