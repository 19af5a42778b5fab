import json
from types import SimpleNamespace

import pytest

from app import create_app
from services.db import init_store
from services.generation_service import init_generation_service
from services.models import Quiz, QuizQuestion


class FakeGroq:
    """Stands in for groq.Groq: returns queued replies from chat.completions.create."""

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


@pytest.fixture
def store(tmp_path):
    return init_store("local", data_dir=str(tmp_path / "data"))


@pytest.fixture
def fake_groq():
    return FakeGroq()


@pytest.fixture
def app(tmp_path, fake_groq):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "STORE_BACKEND": "local",
        "DATA_DIR": str(tmp_path / "data"),
        "GROQ_API_KEY": "test-key",
        "ALLOW_RESUBMISSION": False,
    })
    init_generation_service("test-key", client=fake_groq)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_quiz():
    return Quiz(
        id="quiz1",
        title="Variables",
        created_by="teacher1",
        assigned_to=["student1"],
        questions=[
            QuizQuestion(id="q1", question="Not primitive?", options=["String", "Number", "Boolean", "Array"],
                         correct_option_index=3),
            QuizQuestion(id="q2", question="typeof null?", options=["null", "undefined", "object", "number"],
                         correct_option_index=2),
            QuizQuestion(id="q3", question="Strict equality?", options=["==", "===", "=", "!="],
                         correct_option_index=1),
        ],
    )


def questions_json(count=2):
    return json.dumps([
        {
            "question": f"Question {i}?",
            "options": ["A", "B", "C", "D"],
            "correctOptionIndex": i % 4,
            "explanation": f"Because {i}",
        }
        for i in range(count)
    ])
