"""Curriculum authoring: curricula own modules, modules own topics."""

import logging
import uuid
from typing import Any, Dict, List, Optional

from services.db import CURRICULUMS, USERS, get_store
from services.errors import EntityNotFound, PermissionDenied, ValidationError
from services.models import Curriculum, Module, Topic, utc_now
from utils.helpers import as_id_list, as_text

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 10


def _new_id() -> str:
    return str(uuid.uuid4())


def _build_topic(raw: Any, label: str) -> Optional[Topic]:
    # topics may arrive as bare strings straight from extraction
    if isinstance(raw, str):
        raw = {"title": raw}
    if not isinstance(raw, dict):
        raise ValidationError(f"{label}: topics must be titles or objects with a title.")
    title = as_text(raw.get("title"), f"{label} topic title")
    if not title:
        return None
    return Topic(id=_new_id(), title=title, description=as_text(raw.get("description"), f"{label} topic description"))


def _build_modules(modules: Any) -> List[Module]:
    if not modules:
        raise ValidationError("A curriculum needs at least one module.")
    if not isinstance(modules, list):
        raise ValidationError("Modules must be a list.")

    built = []
    for i, raw in enumerate(modules, start=1):
        label = f"Module {i}"
        if not isinstance(raw, dict):
            raise ValidationError(f"{label}: expected an object with a title and topics.")
        title = as_text(raw.get("title"), f"{label} title")
        if not title:
            raise ValidationError(f"{label}: title is required.")

        raw_topics = raw.get("topics") or []
        if not isinstance(raw_topics, list):
            raise ValidationError(f"{label}: topics must be a list.")
        topics = [t for t in (_build_topic(r, label) for r in raw_topics) if t]
        if not topics:
            raise ValidationError(f"{label}: add at least one topic.")

        built.append(Module(
            id=_new_id(),
            title=title,
            description=as_text(raw.get("description"), f"{label} description"),
            topics=topics,
        ))
    return built


def create_curriculum(teacher_id: str, title: str, description: str,
                      modules: List[Dict[str, Any]]) -> Curriculum:
    """Create a curriculum and record it on the teacher in one batch."""
    title = as_text(title, "Curriculum title")
    if not title:
        raise ValidationError("Curriculum title is required.")

    store = get_store()
    curriculum = Curriculum(
        id=store.new_id(CURRICULUMS),
        teacher_id=teacher_id,
        title=title,
        description=as_text(description, "Curriculum description"),
        modules=_build_modules(modules),
        created_at=utc_now(),
    )
    batch = store.batch()
    batch.set(CURRICULUMS, curriculum.id, curriculum.to_dict())
    batch.array_union(USERS, teacher_id, "curriculums", [curriculum.id])
    batch.commit()
    logger.info("Created curriculum %s with %d topics", curriculum.id, len(curriculum.topics))
    return curriculum


def get_curriculum(curriculum_id: str) -> Optional[Curriculum]:
    doc = get_store().get(CURRICULUMS, curriculum_id)
    return Curriculum.from_dict(doc) if doc else None


def get_owned_curriculum(curriculum_id: str, teacher_id: str) -> Curriculum:
    curriculum = get_curriculum(curriculum_id)
    if not curriculum:
        raise EntityNotFound("curriculum", curriculum_id)
    if curriculum.teacher_id != teacher_id:
        raise PermissionDenied("This curriculum belongs to another teacher.")
    return curriculum


def get_teacher_curriculums(teacher_id: str) -> List[Curriculum]:
    docs = get_store().query(CURRICULUMS, teacher_id=teacher_id)
    return [Curriculum.from_dict(d) for d in docs]


def update_curriculum(curriculum_id: str, teacher_id: str, updates: Dict[str, Any]) -> Curriculum:
    """Title and description can change; modules and topics cannot."""
    curriculum = get_owned_curriculum(curriculum_id, teacher_id)

    fields: Dict[str, Any] = {}
    if "title" in updates:
        title = as_text(updates.get("title"), "Curriculum title")
        if not title:
            raise ValidationError("Curriculum title is required.")
        fields["title"] = title
    if "description" in updates:
        fields["description"] = as_text(updates.get("description"), "Curriculum description")
    if "modules" in updates:
        raise ValidationError("Modules cannot be changed after the curriculum is created.")
    if not fields:
        return curriculum

    get_store().update(CURRICULUMS, curriculum_id, fields)
    curriculum.title = fields.get("title", curriculum.title)
    curriculum.description = fields.get("description", curriculum.description)
    return curriculum


def select_topics(curriculum: Curriculum, topic_ids: List[str]) -> List[Topic]:
    """Topics of the curriculum whose ids were selected, in curriculum order."""
    wanted = set(as_id_list(topic_ids, "Topic ids"))
    return [t for t in curriculum.topics if t.id in wanted]


def topics_prompt_content(topics: List[Topic]) -> str:
    return "\n\n".join(f"Topic: {t.title}\nDescription: {t.description}" for t in topics)


def module_extraction_content(curriculum_title: str, module_title: str, description: str) -> str:
    """Module context sent for topic extraction."""
    description = as_text(description, "Module description")
    if len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            "Please provide a detailed module description to extract topics "
            f"(at least {MIN_DESCRIPTION_LENGTH} characters)."
        )
    return (
        f"Curriculum: {as_text(curriculum_title, 'Curriculum title')}\n"
        f"Module: {as_text(module_title, 'Module title')}\n"
        f"Description: {description}"
    )
