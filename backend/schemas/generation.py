from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemKind(str, Enum):
    FLASHCARDS = "flashcards"
    QUIZ = "quiz"


class FlashcardItem(BaseModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class QuizQuestionItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_options: List[int] = Field(alias="correctOptions", min_length=1, max_length=3)
    explanation: str = ""


class FromDocumentIn(BaseModel):
    document_id: int
    user_id: int
    number_of_cards: int = Field(default=10, ge=1)
    focus_topics: Optional[str] = None
