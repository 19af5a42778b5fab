"""Scoring of submitted multiple-choice answers against a quiz's answer key."""

from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from services.models import OPTIONS_PER_QUESTION, UNANSWERED, Quiz, QuizResult, utc_now
from utils.helpers import parse_int


def _selected_index(value: Any) -> int:
    idx = parse_int(value, UNANSWERED)
    if idx is None or not 0 <= idx < OPTIONS_PER_QUESTION:
        return UNANSWERED
    return idx


def build_answer_sheet(quiz: Quiz, answers: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """One entry per question; anything missing or unusable becomes UNANSWERED."""
    answers = answers or {}
    return {q.id: _selected_index(answers.get(q.id)) for q in quiz.questions}


def find_unanswered(quiz: Quiz, answers: Optional[Mapping[str, Any]]) -> List[str]:
    """Question ids still unanswered, in quiz order."""
    sheet = build_answer_sheet(quiz, answers)
    return [qid for qid, idx in sheet.items() if idx == UNANSWERED]


class QuizScorer:
    """Counts correct answers. Pure apart from the clock, which can be injected."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or utc_now

    def score(self, quiz: Quiz, answers: Optional[Mapping[str, Any]], student_id: str) -> QuizResult:
        sheet = build_answer_sheet(quiz, answers)
        correct = sum(
            1 for q in quiz.questions
            if sheet[q.id] != UNANSWERED and sheet[q.id] == q.correct_option_index
        )
        return QuizResult(
            quiz_id=quiz.id,
            student_id=student_id,
            score=correct,
            total_questions=len(quiz.questions),
            answers=sheet,
            completed_at=self.clock(),
        )


def score_quiz(quiz: Quiz, answers: Optional[Mapping[str, Any]], student_id: str) -> QuizResult:
    return QuizScorer().score(quiz, answers, student_id)


def review_items(quiz: Quiz, result: QuizResult) -> List[Dict[str, Any]]:
    """Per-question breakdown shown on the result page."""
    items = []
    for q in quiz.questions:
        selected = result.answers.get(q.id, UNANSWERED)
        items.append({
            "question_id": q.id,
            "question": q.question,
            "options": list(q.options),
            "selected_option_index": selected,
            "correct_option_index": q.correct_option_index,
            "is_correct": selected == q.correct_option_index,
            "explanation": q.explanation,
        })
    return items
