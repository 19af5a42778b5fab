"""Topic extraction and quiz generation through the Groq LLM."""

import logging
from typing import Any, Dict, List, Optional

import groq

from services.models import QuizQuestion
from services.response_normalizer import normalize_questions, normalize_topics
from utils.groq_utils import (
    DEFAULT_GROQ_MODEL,
    DEFAULT_VISION_MODEL,
    IMAGE_TOPICS_PROMPT,
    QUIZ_SYSTEM_PROMPT,
    TOPICS_SYSTEM_PROMPT,
    build_quiz_prompt,
    build_topics_prompt,
    call_groq_text,
    call_groq_vision,
    llm_status,
    make_client,
)

logger = logging.getLogger(__name__)


class GenerationService:
    """
    Wraps the LLM calls and runs every response through the normalizer.

    Upstream failures (no key, network errors, timeouts, API errors) are logged
    and reported as an empty list; retrying is left to the user.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        vision_model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Any = None,
    ):
        self.api_key = api_key
        self.model = model or DEFAULT_GROQ_MODEL
        self.vision_model = vision_model or DEFAULT_VISION_MODEL
        self.timeout = timeout
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = make_client(self.api_key, self.timeout)
        return self._client

    def status(self) -> Dict[str, bool]:
        return llm_status(self.api_key, self._client)

    def extract_topics(self, content: str) -> List[str]:
        """Ask the model for the main topics of some curriculum text."""
        try:
            raw = call_groq_text(
                self._get_client(),
                TOPICS_SYSTEM_PROMPT,
                build_topics_prompt(content),
                model=self.model,
                temperature=0.2,
                max_tokens=800,
            )
        except groq.GroqError as e:
            logger.error("Topic extraction failed: %s", e)
            return []
        topics = normalize_topics(raw)
        logger.info("Extracted %d topics", len(topics))
        return topics

    def extract_topics_from_image(self, image_base64: str, mime_type: str = "image/jpeg") -> List[str]:
        try:
            raw = call_groq_vision(
                self._get_client(),
                IMAGE_TOPICS_PROMPT,
                image_base64,
                mime_type=mime_type,
                model=self.vision_model,
            )
        except groq.GroqError as e:
            logger.error("Topic extraction from image failed: %s", e)
            return []
        return normalize_topics(raw)

    def generate_questions(self, content: str, num_questions: int = 5, language: str = "English") -> List[QuizQuestion]:
        try:
            raw = call_groq_text(
                self._get_client(),
                QUIZ_SYSTEM_PROMPT,
                build_quiz_prompt(content, num_questions, language),
                model=self.model,
                temperature=0.4,
                max_tokens=6000,
            )
        except groq.GroqError as e:
            logger.error("Quiz generation failed: %s", e)
            return []

        questions = normalize_questions(raw)
        if not questions:
            logger.warning("Quiz generation returned no usable questions")
        # the model sometimes over-delivers
        return questions[:num_questions]


# Global generation service instance (initialized in app.py)
generation_service: Optional[GenerationService] = None


def init_generation_service(
    api_key: Optional[str],
    model: Optional[str] = None,
    vision_model: Optional[str] = None,
    timeout: Optional[float] = None,
    client: Any = None,
) -> GenerationService:
    """Initialize global generation service."""
    global generation_service
    generation_service = GenerationService(api_key, model, vision_model, timeout, client)
    return generation_service


def get_generation_service() -> GenerationService:
    """Get global generation service instance."""
    if generation_service is None:
        raise RuntimeError("Generation service has not been initialized")
    return generation_service
