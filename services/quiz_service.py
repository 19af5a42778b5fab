"""Quiz service for creating, assigning and submitting quizzes."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from services.db import QUIZZES, RESULTS, USERS, get_store
from services.errors import ConflictError, EntityNotFound, PermissionDenied, ValidationError
from services.models import Quiz, QuizQuestion, QuizResult, Student, Topic, utc_now
from services.response_normalizer import normalize_question_entries
from services.user_service import get_student
from utils.helpers import as_id_list, as_text

logger = logging.getLogger(__name__)


def coerce_questions(items: List[Any]) -> List[QuizQuestion]:
    """
    Validate questions posted back by the teacher (possibly edited after generation).

    Same rules as model output, except one malformed entry rejects the whole set.
    """
    if not isinstance(items, list):
        raise ValidationError("Questions must be a list.")
    valid = normalize_question_entries(items)
    if len(valid) != len(items):
        raise ValidationError("Every question needs text, exactly 4 options and a correct option index 0-3.")
    return valid


def create_quiz(
    *,
    teacher_id: str,
    title: str,
    questions: List[QuizQuestion],
    assigned_to: List[str],
    description: str = "",
    language: str = "English",
    curriculum_id: Optional[str] = None,
    topics: Optional[List[Topic]] = None,
) -> Quiz:
    """
    Create a quiz and assign it to students.

    The quiz document and every student's assigned_quizzes are written in one
    batch, so either all assignments land or none do.
    """
    title = as_text(title, "Quiz title")
    if not title:
        raise ValidationError("Please provide a title for your quiz.")
    assigned_to = as_id_list(assigned_to, "Assigned students")
    if not assigned_to:
        raise ValidationError("Please select at least one student to assign this quiz to.")
    if not questions:
        raise ValidationError("Please generate questions for your quiz.")

    for student_id in assigned_to:
        student = get_student(student_id)
        if not student:
            raise EntityNotFound("student", student_id)
        if student.teacher != teacher_id:
            raise PermissionDenied(f"Student {student_id} is not in your class.")

    store = get_store()
    quiz = Quiz(
        id=store.new_id(QUIZZES),
        title=title,
        description=as_text(description, "Quiz description"),
        language=as_text(language, "Language") or "English",
        questions=list(questions),
        created_by=teacher_id,
        assigned_to=assigned_to,
        curriculum_id=curriculum_id,
        topics=[{"id": t.id, "title": t.title} for t in topics or []],
        created_at=utc_now(),
    )

    batch = store.batch()
    batch.set(QUIZZES, quiz.id, quiz.to_dict())
    for student_id in assigned_to:
        batch.array_union(USERS, student_id, "assigned_quizzes", [quiz.id])
    batch.commit()

    logger.info("Created quiz %s (%d questions) for %d students", quiz.id, len(quiz.questions), len(assigned_to))
    return quiz


def get_quiz(quiz_id: str) -> Optional[Quiz]:
    doc = get_store().get(QUIZZES, quiz_id)
    return Quiz.from_dict(doc) if doc else None


def get_teacher_quizzes(teacher_id: str) -> List[Quiz]:
    return [Quiz.from_dict(d) for d in get_store().query(QUIZZES, created_by=teacher_id)]


def get_student_quizzes(student: Student) -> List[Quiz]:
    """Quizzes assigned to the student; ids pointing at missing quizzes are skipped."""
    quizzes = []
    for quiz_id in student.assigned_quizzes:
        quiz = get_quiz(quiz_id)
        if quiz:
            quizzes.append(quiz)
        else:
            logger.warning("Student %s is assigned missing quiz %s", student.id, quiz_id)
    return quizzes


def split_pending_completed(student: Student, quizzes: List[Quiz]) -> Tuple[List[Quiz], List[Quiz]]:
    pending = [q for q in quizzes if q.id not in student.completed_quizzes]
    completed = [q for q in quizzes if q.id in student.completed_quizzes]
    return pending, completed


def get_assigned_quiz(quiz_id: str, student: Student) -> Quiz:
    quiz = get_quiz(quiz_id)
    if not quiz:
        raise EntityNotFound("quiz", quiz_id)
    if student.id not in quiz.assigned_to and quiz_id not in student.assigned_quizzes:
        raise PermissionDenied("You are not assigned to this quiz.")
    return quiz


def student_view(quiz: Quiz) -> Dict[str, Any]:
    """Quiz as sent to students: no answer key, no explanations."""
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "language": quiz.language,
        "questions": [q.to_student_dict() for q in quiz.questions],
    }


def submit_quiz_result(result: QuizResult, allow_resubmission: bool = False) -> QuizResult:
    """
    Store a scored result under its (quiz, student) key and on the student record.

    The write is an upsert, so retrying the same submission is safe.
    """
    store = get_store()
    key = result.key
    if not allow_resubmission and store.get(RESULTS, key):
        raise ConflictError("You have already completed this quiz.")

    payload = result.to_dict()
    batch = store.batch()
    batch.set(RESULTS, key, payload)
    batch.update(USERS, result.student_id, {f"completed_quizzes.{result.quiz_id}": payload})
    batch.commit()
    logger.info("Stored result %s: %d/%d", key, result.score, result.total_questions)
    return result


def get_student_results(student_id: str) -> List[QuizResult]:
    return [QuizResult.from_dict(d) for d in get_store().query(RESULTS, student_id=student_id)]


def get_quiz_results(quiz_id: str) -> List[QuizResult]:
    return [QuizResult.from_dict(d) for d in get_store().query(RESULTS, quiz_id=quiz_id)]
