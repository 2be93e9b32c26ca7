# backend/pipeline/parser.py
"""Turn a free-text model completion into typed flashcards or quiz questions.

Strategies are tried in order and the first one producing at least one item wins:

1. the whole completion parsed as JSON
2. the content of the first markdown code fence
3. the first bracket-balanced ``[...]`` or ``{...}`` substring (only when no fence exists)
4. line-by-line reconstruction of question/answer pairs (flashcards only)
5. a single placeholder item

``parse_response`` never raises and never returns an empty list.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from loguru import logger

from schemas.generation import FlashcardItem, ItemKind, QuizQuestionItem

Item = Union[FlashcardItem, QuizQuestionItem]

STRATEGY_DIRECT = "direct"
STRATEGY_FENCED = "fenced"
STRATEGY_BRACKETS = "brackets"
STRATEGY_LINES = "lines"
STRATEGY_SENTINEL = "sentinel"

NO_ANSWER = "No answer provided"
NO_EXPLANATION = "No explanation provided."
OPTION_LABELS = ["Option A", "Option B", "Option C", "Option D"]
WRAPPER_KEYS = ("flashcards", "cards", "questions", "items", "quiz")

FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
KEY_PREFIX_RE = re.compile(r'^\s*"?(?:question|answer|r[ée]ponse)"?\s*:\s*', re.IGNORECASE)
ANSWER_KEY_RE = re.compile(r'^\s*"?(?:answer|r[ée]ponse)"?\s*:', re.IGNORECASE)
NOISE_CHARS = " \t\"',{}[]"

SENTINEL_FLASHCARD = FlashcardItem(
    question="Flashcard generation failed for this document",
    answer=(
        "The AI response could not be turned into flashcards. "
        "Please retry the generation, ideally with a better formatted or text-based document."
    ),
)

SENTINEL_QUESTION = QuizQuestionItem(
    question="Quiz generation failed for this document. What should you do next?",
    options=[
        "Retry the generation with the same document",
        "Stop studying this document",
        "Delete your account",
        "Wait for the quiz to appear on its own",
    ],
    correct_options=[0],
    explanation=(
        "The AI response could not be turned into quiz questions. "
        "Retrying usually works; a better formatted or shorter document also helps."
    ),
)


@dataclass
class ParseOutcome:
    items: List[Item]
    strategy: str

    @property
    def degraded(self) -> bool:
        return self.strategy == STRATEGY_SENTINEL


@dataclass
class _PendingCard:
    question: str
    answer: Optional[str] = None


# ---------- JSON helpers ----------

def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, TypeError, RecursionError):
        return None


def _records(value: Any) -> Optional[list]:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        lowered = {str(k).lower(): v for k, v in value.items()}
        for key in WRAPPER_KEYS:
            if isinstance(lowered.get(key), list):
                return lowered[key]
        if "question" in lowered:
            return [value]
    return None


def balanced_substring(text: str) -> Optional[str]:
    """First ``[...]`` or ``{...}`` region, counting only that bracket type."""
    starts = [i for i in (text.find("["), text.find("{")) if i >= 0]
    if not starts:
        return None
    start = min(starts)
    opener = text[start]
    closer = "]" if opener == "[" else "}"
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def fenced_block(text: str) -> Optional[str]:
    m = FENCE_RE.search(text)
    if not m:
        return None
    return m.group(1).strip()


# ---------- record normalisation ----------

def _field(record: dict, *names: str) -> Any:
    lowered = {str(k).lower(): v for k, v in record.items()}
    for name in names:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return None


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return ", ".join(t for t in (_text(v) for v in value) if t.strip())
    return json.dumps(value, ensure_ascii=False)


def _option_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        s = value.strip().lower().rstrip(".)")
        if s.isdigit():
            return int(s)
        if len(s) == 1 and s in "abcd":
            return "abcd".index(s)
    return None


def normalise_flashcards(records: list) -> List[FlashcardItem]:
    cards: List[FlashcardItem] = []
    for idx, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            continue
        question = _text(_field(record, "question", "front"))
        answer = _text(_field(record, "answer", "back", "réponse", "reponse"))
        if not question.strip() and not answer.strip():
            continue
        cards.append(FlashcardItem(
            question=question if question.strip() else f"Question {idx} about the document",
            answer=answer if answer.strip() else NO_ANSWER,
        ))
    return cards


def normalise_options(raw: Any) -> List[str]:
    if isinstance(raw, dict):
        raw = list(raw.values())
    if not isinstance(raw, list):
        return list(OPTION_LABELS)
    options = [_text(o) for o in raw[:4]]
    return [o if o.strip() else OPTION_LABELS[i] for i, o in enumerate(options)] + OPTION_LABELS[len(options):]


def normalise_correct_options(raw: Any) -> List[int]:
    if not isinstance(raw, list):
        raw = [raw]
    correct: List[int] = []
    for value in raw:
        idx = _option_index(value)
        if idx is not None and 0 <= idx <= 3 and idx not in correct:
            correct.append(idx)
    if not correct:
        return [0]
    return correct[:3]


def _explanation(value: Any) -> str:
    if value is None:
        return NO_EXPLANATION
    return _text(value)


def normalise_questions(records: list) -> List[QuizQuestionItem]:
    questions: List[QuizQuestionItem] = []
    for idx, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            continue
        question = _text(_field(record, "question"))
        raw_options = _field(record, "options", "choices")
        if not question.strip() and raw_options is None:
            continue
        raw_correct = _field(record, "correctOptions", "correct_options", "correct", "answers", "answer")
        questions.append(QuizQuestionItem(
            question=question if question.strip() else f"Question {idx} about the document",
            options=normalise_options(raw_options),
            correct_options=normalise_correct_options(raw_correct),
            explanation=_explanation(_field(record, "explanation")),
        ))
    return questions


def _items_from(value: Any, kind: ItemKind) -> List[Item]:
    records = _records(value)
    if not records:
        return []
    if kind == ItemKind.QUIZ:
        return normalise_questions(records)
    return normalise_flashcards(records)


# ---------- line heuristic (flashcards) ----------

def _clean_line(line: str) -> str:
    return KEY_PREFIX_RE.sub("", line.strip()).strip(NOISE_CHARS)


def reconstruct_flashcards(text: str) -> List[FlashcardItem]:
    pending: List[_PendingCard] = []
    current: Optional[_PendingCard] = None
    for line in text.splitlines():
        if not line.strip():
            continue
        lowered = line.lower()
        if not ANSWER_KEY_RE.match(line) and ("question" in lowered or "?" in line):
            current = _PendingCard(question=_clean_line(line))
            pending.append(current)
        elif current is not None and current.answer is None and (
            "answer" in lowered or "réponse" in lowered or "reponse" in lowered
        ):
            current.answer = _clean_line(line)

    cards = []
    for card in pending:
        if not card.question:
            continue
        cards.append(FlashcardItem(question=card.question, answer=card.answer or NO_ANSWER))
    return cards


# ---------- entry point ----------

def _sentinel(kind: ItemKind) -> List[Item]:
    if kind == ItemKind.QUIZ:
        return [SENTINEL_QUESTION.model_copy(deep=True)]
    return [SENTINEL_FLASHCARD.model_copy(deep=True)]


def _run_strategies(text: str, kind: ItemKind) -> ParseOutcome:
    items = _items_from(_loads(text.strip()), kind)
    if items:
        return ParseOutcome(items, STRATEGY_DIRECT)

    inner = fenced_block(text)
    if inner is not None:
        items = _items_from(_loads(inner), kind)
        if items:
            return ParseOutcome(items, STRATEGY_FENCED)
    else:
        candidate = balanced_substring(text)
        if candidate is not None:
            items = _items_from(_loads(candidate), kind)
            if items:
                return ParseOutcome(items, STRATEGY_BRACKETS)

    if kind == ItemKind.FLASHCARDS:
        items = reconstruct_flashcards(text)
        if items:
            return ParseOutcome(items, STRATEGY_LINES)

    return ParseOutcome(_sentinel(kind), STRATEGY_SENTINEL)


def parse_response(raw_text: Any, kind: ItemKind) -> ParseOutcome:
    text = raw_text if isinstance(raw_text, str) else ""
    try:
        outcome = _run_strategies(text, kind)
    except Exception:
        logger.exception("Unexpected error while parsing the model response")
        outcome = ParseOutcome(_sentinel(kind), STRATEGY_SENTINEL)

    if outcome.degraded:
        logger.bind(event="parse_fallback", kind=kind.value, raw_length=len(text)).warning(
            f"Could not parse {kind.value} from model response (length={len(text)}); placeholder substituted"
        )
    elif outcome.strategy != STRATEGY_DIRECT:
        logger.warning(f"Parsed {len(outcome.items)} {kind.value} item(s) using the '{outcome.strategy}' fallback")
    else:
        logger.info(f"Parsed {len(outcome.items)} {kind.value} item(s)")
    return outcome


def parse(raw_text: Any, kind: ItemKind) -> List[Item]:
    return parse_response(raw_text, kind).items
