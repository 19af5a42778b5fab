"""Percentages for the student and teacher dashboards.

All of these are computed on demand from already-fetched records; nothing is
cached or persisted.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from services.models import QuizResult, Student
from utils.helpers import percentage, round_half_up


def _score_and_total(result: Any):
    if isinstance(result, QuizResult):
        return result.score, result.total_questions
    return int(result.get("score") or 0), int(result.get("total_questions") or 0)


def overall_score(completed_quizzes: Mapping[str, Any]) -> int:
    """Overall percentage across every completed quiz; 0 with nothing completed."""
    sum_score = 0
    sum_total = 0
    for result in (completed_quizzes or {}).values():
        score, total = _score_and_total(result)
        sum_score += score
        sum_total += total
    return percentage(sum_score, sum_total)


def class_aggregate(
    per_student_percentages: List[int],
    students_with_completions: Optional[int] = None,
    total_students: Optional[int] = None,
) -> Dict[str, int]:
    """
    Class-wide average, best percentage and completion rate.

    students_with_completions is required whenever percentages are given;
    a 0% entry may or may not be a completion. total_students defaults to the
    number of percentages given.
    """
    if students_with_completions is None:
        if per_student_percentages:
            raise ValueError("students_with_completions is required when percentages are given")
        students_with_completions = 0
    if total_students is None:
        total_students = len(per_student_percentages)

    average = 0
    best = 0
    if per_student_percentages:
        average = round_half_up(sum(per_student_percentages) / len(per_student_percentages))
        best = max(per_student_percentages)

    return {
        "average": average,
        "max": best,
        "completion_rate": percentage(students_with_completions, total_students),
    }


def student_performance(students: Iterable[Student]) -> Dict[str, int]:
    return {s.id: overall_score(s.completed_quizzes) for s in students}


def roster_summary(students: List[Student]) -> Dict[str, Any]:
    performance = student_performance(students)
    with_completions = sum(1 for s in students if s.completed_quizzes)
    return {
        "performance": performance,
        "aggregate": class_aggregate(list(performance.values()), with_completions, len(students)),
        "assigned_quizzes": sum(len(s.assigned_quizzes) for s in students),
    }


def quiz_summary(results: List[QuizResult]) -> Dict[str, int]:
    """Attempts, average and best percentage for one quiz."""
    percentages = [percentage(r.score, r.total_questions) for r in results]
    return {
        "attempts": len(results),
        "average": round_half_up(sum(percentages) / len(percentages)) if percentages else 0,
        "best": max(percentages) if percentages else 0,
    }
