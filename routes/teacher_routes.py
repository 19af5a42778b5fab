"""Teacher-facing routes for curricula, quiz generation and class performance."""

import logging

from flask import Blueprint, current_app, jsonify, request

from services.curriculum_service import (
    create_curriculum,
    get_owned_curriculum,
    get_teacher_curriculums,
    module_extraction_content,
    select_topics,
    topics_prompt_content,
    update_curriculum,
)
from services.errors import EntityNotFound, PermissionDenied, ValidationError
from services.generation_service import get_generation_service
from services.models import ROLE_TEACHER
from services.performance_service import quiz_summary, roster_summary
from services.quiz_service import (
    coerce_questions,
    create_quiz,
    get_quiz,
    get_quiz_results,
    get_teacher_quizzes,
)
from services.session import current_user, login_required
from services.user_service import get_teacher_students
from utils.helpers import as_text, json_body, parse_int, percentage, theme_color
from utils.pdf_utils import UnsupportedUpload, read_curriculum_upload

logger = logging.getLogger(__name__)

teacher_bp = Blueprint('teacher', __name__, url_prefix='/api/teacher')


def _curriculum_card(curriculum):
    return {
        "id": curriculum.id,
        "title": curriculum.title,
        "description": curriculum.description,
        "modules_count": len(curriculum.modules),
        "topics_count": len(curriculum.topics),
        "color": theme_color(curriculum.id),
    }


def _quiz_card(quiz):
    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "language": quiz.language,
        "questions_count": len(quiz.questions),
        "assigned_count": len(quiz.assigned_to),
        "created_at": quiz.created_at.isoformat() if quiz.created_at else None,
        "color": theme_color(quiz.id),
    }


def _student_rows(students, performance):
    return [
        {
            "id": s.id,
            "name": s.name,
            "email": s.email,
            "assigned_quizzes": len(s.assigned_quizzes),
            "completed_quizzes": len(s.completed_quizzes),
            "performance": performance.get(s.id, 0),
        }
        for s in students
    ]


def _llm_unavailable():
    return jsonify({
        "error": "The LLM API is not properly configured. Topic extraction and quiz generation are unavailable."
    }), 503


@teacher_bp.route('/dashboard', methods=['GET'])
@login_required(ROLE_TEACHER)
def dashboard():
    teacher = current_user()
    curriculums = get_teacher_curriculums(teacher.id)
    quizzes = get_teacher_quizzes(teacher.id)
    students = get_teacher_students(teacher.id)
    summary = roster_summary(students)

    return jsonify({
        "teacher": teacher.public_dict(),
        "curriculums": [_curriculum_card(c) for c in curriculums],
        "quizzes": [_quiz_card(q) for q in quizzes],
        "students": _student_rows(students, summary["performance"]),
        "class": summary["aggregate"],
        "assigned_quizzes": summary["assigned_quizzes"],
    })


# Curriculum endpoints
@teacher_bp.route('/curriculums', methods=['GET'])
@login_required(ROLE_TEACHER)
def list_curriculums():
    curriculums = get_teacher_curriculums(current_user().id)
    return jsonify({"curriculums": [_curriculum_card(c) for c in curriculums]})


@teacher_bp.route('/curriculums', methods=['POST'])
@login_required(ROLE_TEACHER)
def new_curriculum():
    data = json_body()
    curriculum = create_curriculum(
        teacher_id=current_user().id,
        title=data.get('title', ''),
        description=data.get('description', ''),
        modules=data.get('modules') or [],
    )
    return jsonify({"success": True, "curriculum": curriculum.to_dict()}), 201


@teacher_bp.route('/curriculums/<curriculum_id>', methods=['GET'])
@login_required(ROLE_TEACHER)
def curriculum_detail(curriculum_id):
    curriculum = get_owned_curriculum(curriculum_id, current_user().id)
    return jsonify({"curriculum": curriculum.to_dict()})


@teacher_bp.route('/curriculums/<curriculum_id>', methods=['PATCH'])
@login_required(ROLE_TEACHER)
def edit_curriculum(curriculum_id):
    data = json_body()
    curriculum = update_curriculum(curriculum_id, current_user().id, data)
    return jsonify({"success": True, "curriculum": curriculum.to_dict()})


@teacher_bp.route('/topics/extract', methods=['POST'])
@login_required(ROLE_TEACHER)
def extract_topics():
    """
    Extract topics for one module.

    Accepts either JSON ``{curriculum_title, module_title, description}`` or a
    multipart upload in field ``file`` (text, PDF or image).
    """
    service = get_generation_service()
    if not service.status()["key_available"]:
        return _llm_unavailable()

    upload = request.files.get('file')
    if upload is not None and upload.filename:
        try:
            parsed = read_curriculum_upload(upload)
        except UnsupportedUpload as e:
            raise ValidationError(str(e)) from e

        if parsed.kind == "image":
            topics = service.extract_topics_from_image(parsed.image_base64, parsed.mime_type)
        else:
            content = module_extraction_content(
                request.form.get('curriculum_title', ''),
                request.form.get('module_title', ''),
                parsed.text,
            )
            topics = service.extract_topics(content)
    else:
        data = json_body()
        content = module_extraction_content(
            data.get('curriculum_title', ''),
            data.get('module_title', ''),
            data.get('description', ''),
        )
        topics = service.extract_topics(content)

    if not topics:
        return jsonify({
            "error": "No topics could be extracted. Try adding more detailed content, or add topics manually."
        }), 422

    return jsonify({
        "success": True,
        "topics": [{"title": t, "description": ""} for t in topics],
    })


# Quiz endpoints
@teacher_bp.route('/quizzes/generate', methods=['POST'])
@login_required(ROLE_TEACHER)
def generate_quiz():
    """Generate (but do not save) questions for the selected topics."""
    data = json_body()
    curriculum_id = as_text(data.get('curriculum_id'), "Curriculum id")
    if not curriculum_id:
        raise ValidationError("Please select a curriculum.")
    topic_ids = data.get('topic_ids') or []
    if not topic_ids:
        raise ValidationError("Please select at least one topic.")

    curriculum = get_owned_curriculum(curriculum_id, current_user().id)
    topics = select_topics(curriculum, topic_ids)
    if not topics:
        raise ValidationError("None of the selected topics belong to this curriculum.")

    cfg = current_app.config
    num_questions = parse_int(data.get('num_questions'), cfg["DEFAULT_NUM_QUESTIONS"])
    num_questions = max(1, min(num_questions, cfg["MAX_NUM_QUESTIONS"]))
    language = as_text(data.get('language'), "Language") or cfg["DEFAULT_LANGUAGE"]

    service = get_generation_service()
    if not service.status()["key_available"]:
        return _llm_unavailable()

    questions = service.generate_questions(topics_prompt_content(topics), num_questions, language)
    if not questions:
        return jsonify({
            "error": "Failed to generate quiz questions. Please try again or modify your selection."
        }), 422

    return jsonify({
        "success": True,
        "message": f"Successfully generated {len(questions)} questions.",
        "questions": [q.to_dict() for q in questions],
    })


@teacher_bp.route('/quizzes', methods=['POST'])
@login_required(ROLE_TEACHER)
def new_quiz():
    """Save reviewed questions as a quiz and assign it to students."""
    data = json_body()
    teacher = current_user()

    topics = []
    curriculum_id = as_text(data.get('curriculum_id'), "Curriculum id") or None
    if curriculum_id:
        curriculum = get_owned_curriculum(curriculum_id, teacher.id)
        topics = select_topics(curriculum, data.get('topic_ids') or [])

    quiz = create_quiz(
        teacher_id=teacher.id,
        title=data.get('title', ''),
        description=data.get('description', ''),
        language=as_text(data.get('language'), "Language") or current_app.config["DEFAULT_LANGUAGE"],
        questions=coerce_questions(data.get('questions') or []),
        assigned_to=data.get('assigned_to'),
        curriculum_id=curriculum_id,
        topics=topics,
    )
    return jsonify({
        "success": True,
        "message": "Your quiz has been created and assigned to the selected students.",
        "quiz_id": quiz.id,
    }), 201


@teacher_bp.route('/quizzes', methods=['GET'])
@login_required(ROLE_TEACHER)
def list_quizzes():
    quizzes = get_teacher_quizzes(current_user().id)
    return jsonify({"quizzes": [_quiz_card(q) for q in quizzes]})


def _owned_quiz(quiz_id):
    quiz = get_quiz(quiz_id)
    if not quiz:
        raise EntityNotFound("quiz", quiz_id)
    if quiz.created_by != current_user().id:
        raise PermissionDenied("This quiz belongs to another teacher.")
    return quiz


@teacher_bp.route('/quizzes/<quiz_id>', methods=['GET'])
@login_required(ROLE_TEACHER)
def quiz_detail(quiz_id):
    quiz = _owned_quiz(quiz_id)
    return jsonify({"quiz": quiz.to_dict()})


@teacher_bp.route('/quizzes/<quiz_id>/results', methods=['GET'])
@login_required(ROLE_TEACHER)
def quiz_results(quiz_id):
    quiz = _owned_quiz(quiz_id)
    results = get_quiz_results(quiz.id)
    names = {s.id: s.name for s in get_teacher_students(current_user().id)}

    return jsonify({
        "quiz_id": quiz.id,
        "title": quiz.title,
        "summary": quiz_summary(results),
        "results": [
            {
                "student_id": r.student_id,
                "student_name": names.get(r.student_id, ""),
                "score": r.score,
                "total_questions": r.total_questions,
                "percentage": percentage(r.score, r.total_questions),
                "completed_at": r.completed_at.isoformat() if r.completed_at else None,
            }
            for r in results
        ],
        "pending": [sid for sid in quiz.assigned_to if sid not in {r.student_id for r in results}],
    })


@teacher_bp.route('/students', methods=['GET'])
@login_required(ROLE_TEACHER)
def list_students():
    students = get_teacher_students(current_user().id)
    summary = roster_summary(students)
    return jsonify({
        "students": _student_rows(students, summary["performance"]),
        "class": summary["aggregate"],
        "assigned_quizzes": summary["assigned_quizzes"],
    })
