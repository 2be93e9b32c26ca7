# backend/apis/generation_api.py
from typing import Any, Optional

from fastapi import Body, File, Form, Header, UploadFile
from loguru import logger
from pydantic import ValidationError

from pipeline.errors import Forbidden, InvalidInput, PersistenceFailed
from pipeline.orchestrator import GenerationPipeline, UploadedDocument
from pipeline.parser import ParseOutcome
from pipeline.storage import DocumentStorage, file_type_tag, mime_for_file_type
from pipeline.store import NewDocument, RecordStore, SavedBatch
from schemas.generation import FromDocumentIn, ItemKind

from .auth_api import BearerAuth
from .responses import success
from .uploads import parse_positive_int, read_upload

DEFAULT_ITEM_COUNT = 10


class GenerationService:
    """Upload boundary: checks the caller, runs the pipeline, commits the batch."""

    def __init__(
        self,
        pipeline: GenerationPipeline,
        store: RecordStore,
        storage: DocumentStorage,
        auth: BearerAuth,
        max_upload_bytes: int,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self.storage = storage
        self.auth = auth
        self.max_upload_bytes = max_upload_bytes

    def _save(self, kind: ItemKind, user_id: int, document, outcome: ParseOutcome) -> SavedBatch:
        if kind == ItemKind.QUIZ:
            return self.store.save_quiz(user_id, document, outcome.items)
        return self.store.save_flashcards(user_id, document, outcome.items)

    @staticmethod
    def _result(kind: ItemKind, batch: SavedBatch, outcome: ParseOutcome) -> dict:
        parent_key = "quizId" if kind == ItemKind.QUIZ else "listId"
        return {
            "documentId": batch.document_id,
            parent_key: batch.parent_id,
            "itemCount": batch.item_count,
            "parseStrategy": outcome.strategy,
        }

    def from_upload(
        self,
        kind: ItemKind,
        authorization: Optional[str],
        file: Optional[UploadFile],
        user_id: Optional[str],
        number_of_cards: Optional[str],
        focus_topics: Optional[str],
    ) -> dict:
        caller = self.auth.resolve(authorization)
        if file is None or not (user_id or "").strip():
            raise InvalidInput("File or user ID missing")
        if parse_positive_int(user_id, "user_id") != caller:
            raise Forbidden("Unauthorized: user ID does not match the authenticated user")
        count = parse_positive_int(number_of_cards, "number_of_cards", DEFAULT_ITEM_COUNT)
        upload = read_upload(file, self.max_upload_bytes)

        outcome = self.pipeline.run(kind, upload, count, focus_topics)

        storage_path = self.storage.save(caller, upload.filename, upload.content)
        new_doc = NewDocument(
            user_id=caller,
            title=upload.filename,
            storage_path=storage_path,
            file_size=upload.size,
            file_type=file_type_tag(upload.mime_type),
        )
        try:
            batch = self._save(kind, caller, new_doc, outcome)
        except PersistenceFailed:
            self.storage.delete(storage_path)
            raise
        return self._result(kind, batch, outcome)

    def from_document(self, kind: ItemKind, authorization: Optional[str], payload: Any) -> dict:
        caller = self.auth.resolve(authorization)
        try:
            body = FromDocumentIn.model_validate(payload if payload is not None else {})
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) or "body" for err in e.errors())
            raise InvalidInput(f"Missing or invalid fields: {fields}") from e
        if body.user_id != caller:
            raise Forbidden("Unauthorized: user ID does not match the authenticated user")

        doc = self.store.get_document(caller, body.document_id)
        content = self.storage.read(doc.storage_path)
        upload = UploadedDocument(
            content=content,
            mime_type=mime_for_file_type(doc.file_type),
            filename=doc.title,
            size=len(content),
        )
        outcome = self.pipeline.run(kind, upload, body.number_of_cards, body.focus_topics)
        batch = self._save(kind, caller, doc.document_id, outcome)
        return self._result(kind, batch, outcome)


class GenerateFromUploadAPI:
    def __init__(self, service: GenerationService, kind: ItemKind) -> None:
        self.service = service
        self.kind = kind

    def __call__(
        self,
        file: Optional[UploadFile] = File(default=None),
        user_id: Optional[str] = Form(default=None),
        number_of_cards: Optional[str] = Form(default=None),
        focus_topics: Optional[str] = Form(default=None),
        authorization: Optional[str] = Header(default=None),
    ):
        result = self.service.from_upload(self.kind, authorization, file, user_id, number_of_cards, focus_topics)
        logger.info(f"Generated {result['itemCount']} {self.kind.value} item(s) for document id={result['documentId']}")
        return success(result, message=f"Generated {result['itemCount']} {self.kind.value} item(s).")


class GenerateFromDocumentAPI:
    def __init__(self, service: GenerationService, kind: ItemKind) -> None:
        self.service = service
        self.kind = kind

    def __call__(self, body: Any = Body(default=None), authorization: Optional[str] = Header(default=None)):
        result = self.service.from_document(self.kind, authorization, body)
        return success(result, message=f"Generated {result['itemCount']} {self.kind.value} item(s).")
