"""Entities stored in the document store.

Every entity round-trips through plain dicts (``to_dict`` / ``from_dict``) so the
same shapes can be written to Firestore or to the local JSON fallback.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"
ROLES = (ROLE_TEACHER, ROLE_STUDENT)

# answer sheet value for a question the student left blank
UNANSWERED = -1
OPTIONS_PER_QUESTION = 4


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Topic:
    id: str
    title: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Topic":
        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            description=data.get("description") or "",
        )


@dataclass
class Module:
    id: str
    title: str
    description: str = ""
    topics: List[Topic] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "topics": [t.to_dict() for t in self.topics],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Module":
        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            description=data.get("description") or "",
            topics=[Topic.from_dict(t) for t in data.get("topics") or []],
        )


@dataclass
class Curriculum:
    id: str
    teacher_id: str
    title: str
    description: str = ""
    modules: List[Module] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @property
    def topics(self) -> List[Topic]:
        return [topic for module in self.modules for topic in module.topics]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "teacher_id": self.teacher_id,
            "title": self.title,
            "description": self.description,
            "modules": [m.to_dict() for m in self.modules],
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Curriculum":
        return cls(
            id=str(data.get("id") or ""),
            teacher_id=data.get("teacher_id") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            modules=[Module.from_dict(m) for m in data.get("modules") or []],
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class QuizQuestion:
    id: str
    question: str
    options: List[str]
    correct_option_index: int
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correct_option_index": self.correct_option_index,
            "explanation": self.explanation,
        }

    def to_student_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "question": self.question, "options": list(self.options)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizQuestion":
        return cls(
            id=str(data.get("id") or ""),
            question=data.get("question") or "",
            options=list(data.get("options") or []),
            correct_option_index=int(data.get("correct_option_index", UNANSWERED)),
            explanation=data.get("explanation") or "",
        )


@dataclass
class Quiz:
    id: str
    title: str
    questions: List[QuizQuestion]
    created_by: str
    description: str = ""
    language: str = "English"
    assigned_to: List[str] = field(default_factory=list)
    curriculum_id: Optional[str] = None
    topics: List[Dict[str, str]] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "language": self.language,
            "questions": [q.to_dict() for q in self.questions],
            "created_by": self.created_by,
            "assigned_to": list(self.assigned_to),
            "curriculum_id": self.curriculum_id,
            "topics": [dict(t) for t in self.topics],
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Quiz":
        return cls(
            id=str(data.get("id") or ""),
            title=data.get("title") or "",
            description=data.get("description") or "",
            language=data.get("language") or "English",
            questions=[QuizQuestion.from_dict(q) for q in data.get("questions") or []],
            created_by=data.get("created_by") or "",
            assigned_to=list(data.get("assigned_to") or []),
            curriculum_id=data.get("curriculum_id"),
            topics=[dict(t) for t in data.get("topics") or []],
            created_at=parse_timestamp(data.get("created_at")),
        )


@dataclass
class QuizResult:
    quiz_id: str
    student_id: str
    score: int
    total_questions: int
    answers: Dict[str, int] = field(default_factory=dict)
    completed_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return result_key(self.quiz_id, self.student_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quiz_id": self.quiz_id,
            "student_id": self.student_id,
            "score": self.score,
            "total_questions": self.total_questions,
            "answers": dict(self.answers),
            "completed_at": self.completed_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizResult":
        return cls(
            quiz_id=data.get("quiz_id") or "",
            student_id=data.get("student_id") or "",
            score=int(data.get("score") or 0),
            total_questions=int(data.get("total_questions") or 0),
            answers={str(k): int(v) for k, v in (data.get("answers") or {}).items()},
            completed_at=parse_timestamp(data.get("completed_at")),
        )


def result_key(quiz_id: str, student_id: str) -> str:
    """Storage id of the single result a student may hold for a quiz."""
    return f"{quiz_id}__{student_id}"


@dataclass
class User:
    id: str
    name: str
    email: str
    role: str
    profile_image: str = ""
    password_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "profile_image": self.profile_image,
            "password_hash": self.password_hash,
        }

    def public_dict(self) -> Dict[str, Any]:
        data = self.to_dict()
        data.pop("password_hash", None)
        return data


@dataclass
class Teacher(User):
    role: str = ROLE_TEACHER
    students: List[str] = field(default_factory=list)
    curriculums: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"students": list(self.students), "curriculums": list(self.curriculums)})
        return data


@dataclass
class Student(User):
    role: str = ROLE_STUDENT
    teacher: str = ""
    assigned_quizzes: List[str] = field(default_factory=list)
    completed_quizzes: Dict[str, QuizResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "teacher": self.teacher,
            "assigned_quizzes": list(self.assigned_quizzes),
            "completed_quizzes": {qid: r.to_dict() for qid, r in self.completed_quizzes.items()},
        })
        return data


def user_from_dict(data: Dict[str, Any]) -> User:
    """Build the role-specific user from a stored document."""
    common = {
        "id": str(data.get("id") or ""),
        "name": data.get("name") or "",
        "email": data.get("email") or "",
        "profile_image": data.get("profile_image") or "",
        "password_hash": data.get("password_hash"),
    }
    role = data.get("role")
    if role == ROLE_TEACHER:
        return Teacher(
            **common,
            students=list(data.get("students") or []),
            curriculums=list(data.get("curriculums") or []),
        )
    if role == ROLE_STUDENT:
        return Student(
            **common,
            teacher=data.get("teacher") or "",
            assigned_quizzes=list(data.get("assigned_quizzes") or []),
            completed_quizzes={
                qid: QuizResult.from_dict(r)
                for qid, r in (data.get("completed_quizzes") or {}).items()
            },
        )
    return User(role=role or "", **common)
