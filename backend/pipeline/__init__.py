from .errors import (
    ExtractionFailed,
    Forbidden,
    GenerationFailed,
    InvalidInput,
    NotFound,
    PersistenceFailed,
    PipelineError,
    Unauthenticated,
    UnsupportedFormat,
)
from .extractor import ContentExtractor, extract_pdf_text
from .llm_client import ChatCompletionClient
from .orchestrator import GenerationPipeline, UploadedDocument
from .parser import ParseOutcome, parse, parse_response
from .prompts import Prompt, build_prompt
from .vision import VisionDescriber

__all__ = [
    "ChatCompletionClient",
    "ContentExtractor",
    "ExtractionFailed",
    "Forbidden",
    "GenerationFailed",
    "GenerationPipeline",
    "InvalidInput",
    "NotFound",
    "ParseOutcome",
    "PersistenceFailed",
    "PipelineError",
    "Prompt",
    "Unauthenticated",
    "UnsupportedFormat",
    "UploadedDocument",
    "VisionDescriber",
    "build_prompt",
    "extract_pdf_text",
    "parse",
    "parse_response",
]
