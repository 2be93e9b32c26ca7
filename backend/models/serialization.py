# backend/models/serialization.py
"""Single encode/decode boundary for the quiz JSON-text columns."""
import json
from typing import Any, List

from pipeline.parser import normalise_correct_options, normalise_options
from schemas.generation import QuizQuestionItem


def encode_json_column(value: List[Any]) -> str:
    return json.dumps(value, ensure_ascii=False)


def _load_column(value: Any) -> Any:
    # legacy rows may already hold a decoded list
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value


def decode_options(value: Any) -> List[str]:
    return normalise_options(_load_column(value))


def decode_correct_options(value: Any) -> List[int]:
    return normalise_correct_options(_load_column(value))


def question_columns(item: QuizQuestionItem) -> dict:
    return {
        "question": item.question,
        "options": encode_json_column(item.options),
        "correct_options": encode_json_column(item.correct_options),
        "explanation": item.explanation or "",
    }


def question_from_row(row) -> QuizQuestionItem:
    return QuizQuestionItem(
        question=row.question,
        options=decode_options(row.options),
        correct_options=decode_correct_options(row.correct_options),
        explanation=row.explanation or "",
    )
