# backend/apis/quiz_api.py
from typing import Optional

from fastapi import Header

from pipeline.store import RecordStore

from .auth_api import BearerAuth
from .responses import success


class ListQuizzesAPI:
    def __init__(self, store: RecordStore, auth: BearerAuth) -> None:
        self.store = store
        self.auth = auth

    def __call__(self, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        payload = self.store.list_quizzes(user_id)
        return success(payload, message=f"Fetched {len(payload)} quiz(zes).")


class GetQuizAPI:
    """GET /quizzes/{quiz_id}: questions carry decoded 'options' and 'correctOptions' lists."""

    def __init__(self, store: RecordStore, auth: BearerAuth) -> None:
        self.store = store
        self.auth = auth

    def __call__(self, quiz_id: int, authorization: Optional[str] = Header(default=None)):
        user_id = self.auth.resolve(authorization)
        payload = self.store.get_quiz(user_id, quiz_id)
        return success(payload, message=f"Fetched {len(payload['questions'])} question(s) for quiz_id={quiz_id}.")
