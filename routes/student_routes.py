"""Student routes for taking quizzes and viewing results."""

import logging

from flask import Blueprint, current_app, jsonify

from services.errors import EntityNotFound
from services.grading_service import QuizScorer, find_unanswered, review_items
from services.models import ROLE_STUDENT
from services.performance_service import overall_score
from services.quiz_service import (
    get_assigned_quiz,
    get_student_quizzes,
    split_pending_completed,
    student_view,
    submit_quiz_result,
)
from services.session import current_user, login_required
from services.user_service import get_student
from utils.helpers import json_body, percentage, theme_color

logger = logging.getLogger(__name__)

student_bp = Blueprint('student', __name__, url_prefix='/api/student')


def _me():
    """Fresh student record; completed_quizzes may have changed since sign-in."""
    student = get_student(current_user().id)
    if student is None:
        raise EntityNotFound("student", current_user().id)
    return student


def _quiz_item(quiz, result=None):
    item = {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "language": quiz.language,
        "questions_count": len(quiz.questions),
        "color": theme_color(quiz.id),
    }
    if result is not None:
        item["score"] = result.score
        item["total_questions"] = result.total_questions
        item["percentage"] = percentage(result.score, result.total_questions)
    return item


def _quiz_lists(student):
    pending, completed = split_pending_completed(student, get_student_quizzes(student))
    return (
        [_quiz_item(q) for q in pending],
        [_quiz_item(q, student.completed_quizzes[q.id]) for q in completed],
    )


@student_bp.route('/dashboard', methods=['GET'])
@login_required(ROLE_STUDENT)
def dashboard():
    """Pending and completed quizzes plus the overall score."""
    student = _me()
    pending, completed = _quiz_lists(student)
    return jsonify({
        "student": student.public_dict(),
        "pending": pending,
        "completed": completed,
        "overall_score": overall_score(student.completed_quizzes),
    })


@student_bp.route('/quizzes', methods=['GET'])
@login_required(ROLE_STUDENT)
def list_quizzes():
    pending, completed = _quiz_lists(_me())
    return jsonify({"pending": pending, "completed": completed})


@student_bp.route('/quizzes/<quiz_id>', methods=['GET'])
@login_required(ROLE_STUDENT)
def take_quiz(quiz_id):
    """Quiz without the answer key, plus a blank answer sheet."""
    student = _me()
    quiz = get_assigned_quiz(quiz_id, student)
    return jsonify({
        "quiz": student_view(quiz),
        "answers": {q.id: -1 for q in quiz.questions},
        "completed": quiz.id in student.completed_quizzes,
    })


@student_bp.route('/quizzes/<quiz_id>/submit', methods=['POST'])
@login_required(ROLE_STUDENT)
def submit_quiz(quiz_id):
    student = _me()
    quiz = get_assigned_quiz(quiz_id, student)

    data = json_body()
    answers = data.get('answers') or {}
    if not isinstance(answers, dict):
        return jsonify({"error": "Answers must map question ids to option indexes."}), 400

    unanswered = find_unanswered(quiz, answers)
    if unanswered:
        return jsonify({
            "error": f"You have {len(unanswered)} unanswered questions. Please answer all questions before submitting.",
            "unanswered": unanswered,
        }), 400

    result = QuizScorer().score(quiz, answers, student.id)
    submit_quiz_result(result, allow_resubmission=current_app.config["ALLOW_RESUBMISSION"])

    return jsonify({
        "success": True,
        "message": "Your quiz has been submitted successfully.",
        "result": {
            "quiz_id": result.quiz_id,
            "score": result.score,
            "total_questions": result.total_questions,
            "percentage": percentage(result.score, result.total_questions),
        },
    }), 201


@student_bp.route('/results/<quiz_id>', methods=['GET'])
@login_required(ROLE_STUDENT)
def quiz_result(quiz_id):
    student = _me()
    quiz = get_assigned_quiz(quiz_id, student)
    result = student.completed_quizzes.get(quiz.id)
    if result is None:
        raise EntityNotFound("result", quiz.id)

    return jsonify({
        "quiz": {"id": quiz.id, "title": quiz.title, "description": quiz.description},
        "score": result.score,
        "total_questions": result.total_questions,
        "correct": result.score,
        "incorrect": result.total_questions - result.score,
        "percentage": percentage(result.score, result.total_questions),
        "completed_at": result.completed_at.isoformat() if result.completed_at else None,
        "review": review_items(quiz, result),
    })
