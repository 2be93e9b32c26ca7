# backend/apis/documents_api.py
from dataclasses import asdict
from typing import Optional

from fastapi import Header
from loguru import logger

from pipeline.storage import DocumentStorage
from pipeline.store import RecordStore

from .auth_api import BearerAuth
from .responses import success


class ListDocumentsAPI:
    def __init__(self, store: RecordStore, auth: BearerAuth) -> None:
        self.store = store
        self.auth = auth

    def __call__(self, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        payload = [asdict(d) for d in self.store.list_documents(user_id)]
        return success(payload, message=f"Fetched {len(payload)} document(s).")


class DeleteDocumentAPI:
    """DELETE /documents/{document_id}: removes generated lists and quizzes too."""

    def __init__(self, store: RecordStore, storage: DocumentStorage, auth: BearerAuth) -> None:
        self.store = store
        self.storage = storage
        self.auth = auth

    def __call__(self, document_id: int, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        doc = self.store.delete_document(user_id, document_id)
        self.storage.delete(doc.storage_path)
        logger.info(f"Deleted document id={document_id} for user id={user_id}")
        return success({"document_id": document_id}, message=f"Deleted document id={document_id}.")
