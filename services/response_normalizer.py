"""Turn free-form model output into topic lists and validated quiz questions.

Nothing in here raises on malformed model output: bad input degrades to an
empty or partial list and the caller decides what to tell the user.
"""

import json
import logging
import re
import uuid
from typing import Any, Callable, List, Optional

from services.models import OPTIONS_PER_QUESTION, QuizQuestion

logger = logging.getLogger(__name__)

MAX_TOPICS = 10
MAX_TOPIC_LENGTH = 50

_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_QUOTED_RE = re.compile(r'"([^"]+)"')
_LIST_MARKER_RE = re.compile(r"^[\d\s\-*•.]+")

# The quiz prompt asks for correctOptionIndex, stored quizzes used correctAnswer.
# Everything past this module only knows correct_option_index.
_CORRECT_INDEX_KEYS = ("correct_option_index", "correctOptionIndex", "correctAnswer", "correct_answer")
_QUESTION_TEXT_KEYS = ("question", "questionText", "question_text", "prompt")


def _extract_json_array(raw_text: str) -> Optional[list]:
    """Parse the first [...] block of ``raw_text``; None if absent or not valid JSON."""
    match = _JSON_ARRAY_RE.search(raw_text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError as e:
        logger.debug("Model output has an array-shaped block that is not JSON: %s", e)
        return None
    return parsed if isinstance(parsed, list) else None


def _topics_from_lines(raw_text: str) -> List[str]:
    topics = []
    for line in raw_text.splitlines():
        marker = _LIST_MARKER_RE.match(line)
        # only bulleted / numbered lines count; prose and "Here are..." lead-ins don't
        if not marker or not marker.group(0).strip():
            continue
        cleaned = line[marker.end():].strip()
        if 0 < len(cleaned) < MAX_TOPIC_LENGTH:
            topics.append(cleaned)
    return topics


def normalize_topics(raw_text: Optional[str]) -> List[str]:
    """
    Extract up to 10 topic strings from model output.

    Tries, in order: a JSON array of strings, the quoted spans of a broken
    array, and finally bulleted / numbered lines.
    """
    if not raw_text or not raw_text.strip():
        return []

    if _JSON_ARRAY_RE.search(raw_text):
        parsed = _extract_json_array(raw_text)
        if parsed is not None:
            topics = [t.strip() for t in parsed if isinstance(t, str) and t.strip()]
        else:
            topics = [m.strip() for m in _QUOTED_RE.findall(raw_text) if m.strip()]
    else:
        topics = _topics_from_lines(raw_text)

    return topics[:MAX_TOPICS]


def _first_present(entry: dict, keys) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def _coerce_question(entry: Any, new_id: Callable[[], str]) -> Optional[QuizQuestion]:
    if not isinstance(entry, dict):
        return None

    text = _first_present(entry, _QUESTION_TEXT_KEYS)
    if not isinstance(text, str) or not text.strip():
        return None

    options = entry.get("options")
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        return None
    if not all(isinstance(o, str) and o.strip() for o in options):
        return None

    index = _first_present(entry, _CORRECT_INDEX_KEYS)
    # bool is an int subclass; True must not pass as option 1
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    if not 0 <= index < OPTIONS_PER_QUESTION:
        return None

    explanation = entry.get("explanation")
    return QuizQuestion(
        id=new_id(),
        question=text.strip(),
        options=[o.strip() for o in options],
        correct_option_index=index,
        explanation=explanation.strip() if isinstance(explanation, str) else "",
    )


def normalize_questions(raw_text: Optional[str], id_factory: Optional[Callable[[], str]] = None) -> List[QuizQuestion]:
    """
    Extract well-formed multiple-choice questions from model output.

    Entries without exactly 4 non-empty options, or without an integer answer
    index in [0, 3], are dropped; their well-formed siblings are kept. Each
    surviving question gets a fresh id.
    """
    if not raw_text:
        return []
    parsed = _extract_json_array(raw_text)
    if parsed is None:
        return []
    return normalize_question_entries(parsed, id_factory)


def normalize_question_entries(entries: list, id_factory: Optional[Callable[[], str]] = None) -> List[QuizQuestion]:
    """Validate already-parsed question objects, dropping malformed ones."""
    new_id = id_factory or (lambda: str(uuid.uuid4()))
    questions: List[QuizQuestion] = []
    for position, entry in enumerate(entries):
        question = _coerce_question(entry, new_id)
        if question is None:
            logger.debug("Dropping malformed question at position %d", position)
            continue
        questions.append(question)

    if len(questions) < len(entries):
        logger.info("Kept %d of %d questions", len(questions), len(entries))
    return questions
