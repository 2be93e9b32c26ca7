# backend/pipeline/orchestrator.py
from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from schemas.generation import ItemKind

from .errors import InvalidInput
from .extractor import ContentExtractor
from .llm_client import ChatCompletionClient
from .parser import Item, ParseOutcome, parse_response
from .prompts import build_prompt


@dataclass(frozen=True)
class UploadedDocument:
    content: bytes
    mime_type: str
    filename: str
    size: int


class GenerationPipeline:
    """extract -> prompt -> complete -> parse, one sequential chain per request.

    Extraction and generation errors propagate; parsing never fails.
    """

    def __init__(self, extractor: ContentExtractor, llm: ChatCompletionClient, max_tokens: int = 3000) -> None:
        self.extractor = extractor
        self.llm = llm
        self.max_tokens = max_tokens

    def run(
        self,
        kind: ItemKind,
        document: UploadedDocument,
        item_count: int,
        focus_topics: Optional[str] = None,
    ) -> ParseOutcome:
        logger.info(f"Generating {item_count} {kind.value} item(s) from '{document.filename}' ({document.size} bytes)")
        text = self.extractor.extract_text(document.content, document.mime_type)
        if not text.strip():
            raise InvalidInput(
                f"No readable text found in {document.filename}. If it is a scanned PDF, upload the pages as images."
            )

        prompt = build_prompt(kind, text, item_count, focus_topics)
        raw = self.llm.complete(prompt.system_message, prompt.user_message, self.max_tokens)
        outcome = parse_response(raw, kind)
        logger.info(f"Generated {len(outcome.items)} {kind.value} item(s) via '{outcome.strategy}'")
        return outcome

    def generate(
        self,
        kind: ItemKind,
        document: UploadedDocument,
        item_count: int,
        focus_topics: Optional[str] = None,
    ) -> List[Item]:
        return self.run(kind, document, item_count, focus_topics).items
