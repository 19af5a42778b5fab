"""Teacher and student accounts."""

import logging
from typing import Any, List, Optional

from werkzeug.security import generate_password_hash

from services.db import USERS, get_store
from services.errors import ConflictError, EntityNotFound, ValidationError
from services.models import ROLE_STUDENT, ROLE_TEACHER, ROLES, Student, Teacher, User, user_from_dict
from utils.helpers import as_text

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _profile_image(name: str) -> str:
    initial = (name or "?")[0].upper()
    return f"/placeholder.svg?height=200&width=200&text={initial}"


def get_user(user_id: str) -> Optional[User]:
    if not isinstance(user_id, str) or not user_id:
        return None
    doc = get_store().get(USERS, user_id)
    return user_from_dict(doc) if doc else None


def get_user_by_email(email: str) -> Optional[User]:
    if not isinstance(email, str) or not email.strip():
        return None
    docs = get_store().query(USERS, email=email.strip().lower())
    return user_from_dict(docs[0]) if docs else None


def _validate_new_user(name: Any, email: Any, role: str, password: Any) -> None:
    if not as_text(name, "Name"):
        raise ValidationError("Name is required.")
    if "@" not in as_text(email, "Email"):
        raise ValidationError("A valid email address is required.")
    if role not in ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if get_user_by_email(email):
        raise ConflictError("User with this email already exists")


def create_teacher(name: str, email: str, password: str) -> Teacher:
    _validate_new_user(name, email, ROLE_TEACHER, password)
    store = get_store()
    teacher = Teacher(
        id=store.new_id(USERS),
        name=name.strip(),
        email=email.strip().lower(),
        profile_image=_profile_image(name),
        password_hash=generate_password_hash(password),
    )
    store.set(USERS, teacher.id, teacher.to_dict())
    logger.info("Created teacher %s", teacher.id)
    return teacher


def create_student(name: str, email: str, teacher_id: str, password: str) -> Student:
    """Create a student and add them to their teacher's roster in the same write."""
    _validate_new_user(name, email, ROLE_STUDENT, password)
    if not get_teacher(teacher_id):
        raise EntityNotFound("teacher", teacher_id)

    store = get_store()
    student = Student(
        id=store.new_id(USERS),
        name=name.strip(),
        email=email.strip().lower(),
        profile_image=_profile_image(name),
        password_hash=generate_password_hash(password),
        teacher=teacher_id,
    )
    batch = store.batch()
    batch.set(USERS, student.id, student.to_dict())
    batch.array_union(USERS, teacher_id, "students", [student.id])
    batch.commit()
    logger.info("Created student %s for teacher %s", student.id, teacher_id)
    return student


def create_user(name: str, email: str, role: str, password: str,
                teacher_id: Optional[str] = None) -> User:
    if role == ROLE_TEACHER:
        return create_teacher(name, email, password)
    if role == ROLE_STUDENT:
        if not teacher_id:
            raise ValidationError("Please select a teacher.")
        return create_student(name, email, teacher_id, password)
    raise ValidationError(f"Role must be one of: {', '.join(ROLES)}.")


def get_teacher(teacher_id: str) -> Optional[Teacher]:
    user = get_user(teacher_id)
    return user if isinstance(user, Teacher) else None


def get_student(student_id: str) -> Optional[Student]:
    user = get_user(student_id)
    return user if isinstance(user, Student) else None


def get_teacher_students(teacher_id: str) -> List[Student]:
    docs = get_store().query(USERS, role=ROLE_STUDENT, teacher=teacher_id)
    return [user_from_dict(d) for d in docs]


def get_all_teachers() -> List[Teacher]:
    return [user_from_dict(d) for d in get_store().query(USERS, role=ROLE_TEACHER)]
