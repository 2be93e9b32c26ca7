# backend/pipeline/store.py
from dataclasses import dataclass
from typing import Callable, List, Sequence, Union

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Document, Flashcard, FlashcardList, Quiz, QuizQuestion
from models.serialization import question_columns, question_from_row
from schemas.generation import FlashcardItem, QuizQuestionItem

from .errors import Forbidden, NotFound, PersistenceFailed


@dataclass(frozen=True)
class NewDocument:
    user_id: int
    title: str
    storage_path: str
    file_size: int
    file_type: str


@dataclass(frozen=True)
class StoredDocument:
    document_id: int
    user_id: int
    title: str
    storage_path: str
    file_size: int
    file_type: str


@dataclass(frozen=True)
class SavedBatch:
    document_id: int
    parent_id: int
    item_count: int


def _stored(doc: Document) -> StoredDocument:
    return StoredDocument(
        document_id=doc.document_id,
        user_id=doc.user_id,
        title=doc.title,
        storage_path=doc.storage_path,
        file_size=doc.file_size,
        file_type=doc.file_type,
    )


def _owned(row, user_id: int, label: str, row_id: int):
    if row is None:
        raise NotFound(f"{label} id={row_id} not found")
    if row.user_id != user_id:
        raise Forbidden(f"{label} id={row_id} belongs to another user")
    return row


class RecordStore:
    """Relational store for documents and generated content.

    A generation batch (document row for new uploads, parent row, child rows) is
    committed in one transaction.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.SessionLocal = session_factory

    def _document_row(self, db: Session, document: Union[NewDocument, int], user_id: int) -> Document:
        if isinstance(document, NewDocument):
            row = Document(
                user_id=document.user_id,
                title=document.title[:255],
                storage_path=document.storage_path,
                file_size=document.file_size,
                file_type=document.file_type,
            )
            db.add(row)
            db.flush()
            return row
        return _owned(db.get(Document, document), user_id, "Document", document)

    def save_flashcards(
        self, user_id: int, document: Union[NewDocument, int], cards: Sequence[FlashcardItem]
    ) -> SavedBatch:
        try:
            with self.SessionLocal() as db:
                doc = self._document_row(db, document, user_id)
                flist = FlashcardList(
                    user_id=user_id,
                    document_id=doc.document_id,
                    title=f"Flashcards - {doc.title}"[:255],
                    description=f"Flashcard list generated from {doc.title}",
                    card_count=len(cards),
                )
                db.add(flist)
                db.flush()
                for idx, card in enumerate(cards, start=1):
                    db.add(Flashcard(
                        user_id=user_id,
                        document_id=doc.document_id,
                        list_id=flist.list_id,
                        card_index=idx,
                        question=card.question,
                        answer=card.answer,
                    ))
                db.commit()
                batch = SavedBatch(doc.document_id, flist.list_id, len(cards))
        except SQLAlchemyError as e:
            logger.error(f"Saving flashcards failed: {type(e).__name__}: {e}")
            raise PersistenceFailed(f"Saving flashcards failed: {type(e).__name__}") from e
        logger.info(f"Saved flashcard list id={batch.parent_id} with {batch.item_count} card(s)")
        return batch

    def save_quiz(
        self, user_id: int, document: Union[NewDocument, int], questions: Sequence[QuizQuestionItem]
    ) -> SavedBatch:
        try:
            with self.SessionLocal() as db:
                doc = self._document_row(db, document, user_id)
                quiz = Quiz(
                    user_id=user_id,
                    document_id=doc.document_id,
                    title=f"Quiz - {doc.title}"[:255],
                    description=f"Quiz generated from {doc.title}",
                )
                db.add(quiz)
                db.flush()
                for idx, item in enumerate(questions, start=1):
                    db.add(QuizQuestion(quiz_id=quiz.quiz_id, question_index=idx, **question_columns(item)))
                db.commit()
                batch = SavedBatch(doc.document_id, quiz.quiz_id, len(questions))
        except SQLAlchemyError as e:
            logger.error(f"Saving quiz failed: {type(e).__name__}: {e}")
            raise PersistenceFailed(f"Saving quiz failed: {type(e).__name__}") from e
        logger.info(f"Saved quiz id={batch.parent_id} with {batch.item_count} question(s)")
        return batch

    # ---------------- reads ----------------

    def get_document(self, user_id: int, document_id: int) -> StoredDocument:
        with self.SessionLocal() as db:
            return _stored(_owned(db.get(Document, document_id), user_id, "Document", document_id))

    def list_documents(self, user_id: int) -> List[StoredDocument]:
        with self.SessionLocal() as db:
            rows = db.execute(
                select(Document).where(Document.user_id == user_id).order_by(Document.document_id.desc())
            ).scalars().all()
            return [_stored(r) for r in rows]

    def delete_document(self, user_id: int, document_id: int) -> StoredDocument:
        """Delete a document with its lists, cards, quizzes and questions."""
        try:
            with self.SessionLocal() as db:
                doc = _owned(db.get(Document, document_id), user_id, "Document", document_id)
                stored = _stored(doc)
                db.delete(doc)
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Deleting document failed: {type(e).__name__}: {e}")
            raise PersistenceFailed(f"Deleting document failed: {type(e).__name__}") from e
        return stored

    def list_flashcard_lists(self, user_id: int) -> List[dict]:
        with self.SessionLocal() as db:
            rows = db.execute(
                select(FlashcardList).where(FlashcardList.user_id == user_id).order_by(FlashcardList.list_id.desc())
            ).scalars().all()
            return [
                {
                    "list_id": r.list_id,
                    "document_id": r.document_id,
                    "title": r.title,
                    "description": r.description,
                    "card_count": r.card_count,
                }
                for r in rows
            ]

    def get_flashcard_list(self, user_id: int, list_id: int) -> dict:
        with self.SessionLocal() as db:
            flist = _owned(db.get(FlashcardList, list_id), user_id, "Flashcard list", list_id)
            return {
                "list_id": flist.list_id,
                "document_id": flist.document_id,
                "title": flist.title,
                "description": flist.description,
                "card_count": flist.card_count,
                "cards": [
                    {"flashcard_id": c.flashcard_id, "card_index": c.card_index,
                     "question": c.question, "answer": c.answer}
                    for c in flist.cards
                ],
            }

    def list_quizzes(self, user_id: int) -> List[dict]:
        with self.SessionLocal() as db:
            rows = db.execute(
                select(Quiz).where(Quiz.user_id == user_id).order_by(Quiz.quiz_id.desc())
            ).scalars().all()
            return [
                {"quiz_id": r.quiz_id, "document_id": r.document_id, "title": r.title, "description": r.description}
                for r in rows
            ]

    def get_quiz(self, user_id: int, quiz_id: int) -> dict:
        with self.SessionLocal() as db:
            quiz = _owned(db.get(Quiz, quiz_id), user_id, "Quiz", quiz_id)
            return {
                "quiz_id": quiz.quiz_id,
                "document_id": quiz.document_id,
                "title": quiz.title,
                "description": quiz.description,
                "questions": [
                    {"question_id": q.question_id, **question_from_row(q).model_dump(by_alias=True)}
                    for q in quiz.questions
                ],
            }
