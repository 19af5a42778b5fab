import groq

from conftest import FakeGroq, questions_json
from services.generation_service import GenerationService
from utils.groq_utils import build_quiz_prompt, call_groq_vision, llm_status


def test_extract_topics_normalizes_reply():
    client = FakeGroq(['Topics:\n["Loops", "Variables"]'])
    service = GenerationService("key", client=client)
    assert service.extract_topics("Loops and variables in Python") == ["Loops", "Variables"]
    call = client.calls[0]
    assert call["messages"][0]["role"] == "system"
    assert "Loops and variables in Python" in call["messages"][1]["content"]


def test_generate_questions_truncates_to_requested_count():
    service = GenerationService("key", client=FakeGroq([questions_json(4)]))
    questions = service.generate_questions("content", num_questions=3, language="French")
    assert len(questions) == 3
    assert [q.correct_option_index for q in questions] == [0, 1, 2]


def test_upstream_errors_become_empty_lists():
    client = FakeGroq([groq.GroqError("boom"), groq.GroqError("boom"), groq.GroqError("boom")])
    service = GenerationService("key", client=client)
    assert service.extract_topics("content") == []
    assert service.generate_questions("content") == []
    assert service.extract_topics_from_image("aGVsbG8=", "image/png") == []


def test_unparseable_reply_becomes_empty_list():
    service = GenerationService("key", client=FakeGroq(["I cannot help with that."]))
    assert service.generate_questions("content") == []


def test_image_topics_use_data_url():
    client = FakeGroq(['["Cells"]'])
    assert call_groq_vision(client, "prompt", "aGVsbG8=", mime_type="image/png") == '["Cells"]'
    image_part = client.calls[0]["messages"][0]["content"][1]
    assert image_part["image_url"]["url"] == "data:image/png;base64,aGVsbG8="


def test_quiz_prompt_mentions_count_and_language():
    prompt = build_quiz_prompt("Photosynthesis", 7, "Spanish")
    assert "Create 7 multiple-choice questions" in prompt
    assert "Language: Spanish" in prompt
    assert "correctOptionIndex" in prompt


def test_llm_status():
    assert llm_status(None) == {"initialized": False, "key_available": False}
    assert llm_status("key") == {"initialized": True, "key_available": True}
