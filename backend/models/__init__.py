from .db_model import (
    ApiToken,
    Base,
    Document,
    Flashcard,
    FlashcardList,
    Quiz,
    QuizQuestion,
    User,
    init_models,
)

__all__ = [
    "ApiToken", "Base", "Document", "Flashcard", "FlashcardList",
    "Quiz", "QuizQuestion", "User", "init_models",
]
