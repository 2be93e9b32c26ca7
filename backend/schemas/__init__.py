from .auth import SignUpIn, LoginIn
from .generation import FlashcardItem, FromDocumentIn, ItemKind, QuizQuestionItem

__all__ = ["SignUpIn", "LoginIn", "FlashcardItem", "FromDocumentIn", "ItemKind", "QuizQuestionItem"]
