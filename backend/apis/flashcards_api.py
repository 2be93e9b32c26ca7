# backend/apis/flashcards_api.py
from typing import Optional

from fastapi import Header

from pipeline.store import RecordStore

from .auth_api import BearerAuth
from .responses import success


class ListFlashcardListsAPI:
    """GET /flashcard-lists -> the caller's lists, newest first."""

    def __init__(self, store: RecordStore, auth: BearerAuth) -> None:
        self.store = store
        self.auth = auth

    def __call__(self, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        payload = self.store.list_flashcard_lists(user_id)
        return success(payload, message=f"Fetched {len(payload)} flashcard list(s).")


class GetFlashcardListAPI:
    """
    GET /flashcard-lists/{list_id}
    Response 'data' is a JSON string of the list with its cards ordered by card_index:
      { "list_id": ..., "title": "...", "cards": [{ "card_index": 1, "question": "...", "answer": "..." }, ...] }
    """

    def __init__(self, store: RecordStore, auth: BearerAuth) -> None:
        self.store = store
        self.auth = auth

    def __call__(self, list_id: int, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        payload = self.store.get_flashcard_list(user_id, list_id)
        return success(payload, message=f"Fetched {len(payload['cards'])} flashcard(s) for list_id={list_id}.")
