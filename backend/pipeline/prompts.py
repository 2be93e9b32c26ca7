# backend/pipeline/prompts.py
from dataclasses import dataclass
from typing import Optional

from schemas.generation import ItemKind

FLASHCARD_SYSTEM = (
    "You are an experienced educator who writes study flashcards. "
    "Each card has one clear question and a precise, informative answer based only on the provided content."
)

QUIZ_SYSTEM = (
    "You are an experienced educator who writes multiple-choice exam questions. "
    "Wrong options must be plausible but clearly incorrect, and every question comes with an explanation."
)


@dataclass(frozen=True)
class Prompt:
    system_message: str
    user_message: str


def _focus_line(focus_topics: Optional[str]) -> str:
    topics = (focus_topics or "").strip()
    if not topics:
        return ""
    return f"Put particular emphasis on these topics: {topics}\n"


def _flashcards_prompt(content: str, item_count: int, focus_topics: Optional[str]) -> Prompt:
    user = (
        f"From the content below, create EXACTLY {item_count} flashcards (question/answer pairs).\n"
        + _focus_line(focus_topics)
        + "Rules:\n"
        "1. Every question is clear and tests understanding of the content.\n"
        "2. Every answer is informative, accurate and based on the content.\n"
        "3. Vary the question types (definitions, explanations, cause and effect, comparisons).\n"
        "4. Cover the important points of the content.\n\n"
        "Return ONLY a JSON array of objects with the string fields \"question\" and \"answer\", "
        "for example:\n"
        '[{"question": "...", "answer": "..."}]\n'
        "No prose before or after the array, no markdown, no code fences.\n\n"
        "<content>\n"
        f"{content}\n"
        "</content>"
    )
    return Prompt(FLASHCARD_SYSTEM, user)


def _quiz_prompt(content: str, item_count: int, focus_topics: Optional[str]) -> Prompt:
    user = (
        f"From the content below, create EXACTLY {item_count} multiple-choice questions.\n"
        + _focus_line(focus_topics)
        + "Rules:\n"
        "1. Every question has exactly 4 options.\n"
        "2. Vary the number of correct options: about 60% of the questions have exactly 1 correct option, "
        "about 30% have exactly 2 and about 10% have exactly 3.\n"
        "3. NEVER write a question with 0 or 4 correct options.\n"
        "4. Place the correct options at random positions among the 4; they must not always come first.\n"
        "5. Every question has an explanation that justifies the correct options.\n\n"
        "Return ONLY a JSON array of objects with this shape:\n"
        '[{"question": "...", "options": ["...", "...", "...", "..."], '
        '"correctOptions": [1, 3], "explanation": "..."}]\n'
        "correctOptions holds the 0-based indices of the correct options.\n"
        "No prose before or after the array, no markdown, no code fences.\n\n"
        "<content>\n"
        f"{content}\n"
        "</content>"
    )
    return Prompt(QUIZ_SYSTEM, user)


def build_prompt(kind: ItemKind, content: str, item_count: int, focus_topics: Optional[str] = None) -> Prompt:
    if kind == ItemKind.QUIZ:
        return _quiz_prompt(content, item_count, focus_topics)
    return _flashcards_prompt(content, item_count, focus_topics)
