import json

from services.response_normalizer import MAX_TOPICS, normalize_question_entries, normalize_questions, normalize_topics


def _counter():
    ids = iter(range(1, 100))
    return lambda: f"id{next(ids)}"


def test_topics_from_json_array():
    assert normalize_topics('["A","B","C"]') == ["A", "B", "C"]


def test_topics_json_array_inside_prose():
    raw = 'Sure! Here you go:\n["Loops", "Variables", 3, ""]\nHope that helps.'
    assert normalize_topics(raw) == ["Loops", "Variables"]


def test_topics_broken_array_falls_back_to_quoted_spans():
    raw = '["Loops", "Variables", "Functions",]'
    assert normalize_topics(raw) == ["Loops", "Variables", "Functions"]


def test_topics_numbered_lines():
    assert normalize_topics("Here are topics:\n1. Loops\n2. Variables\n") == ["Loops", "Variables"]


def test_topics_bulleted_lines():
    raw = "- Set Theory\n* Graph Theory\n• Logic\n"
    assert normalize_topics(raw) == ["Set Theory", "Graph Theory", "Logic"]


def test_topics_long_lines_are_skipped():
    raw = "1. " + "x" * 60 + "\n2. Short topic"
    assert normalize_topics(raw) == ["Short topic"]


def test_topics_garbage_returns_empty():
    assert normalize_topics("garbage with no list or quotes") == []


def test_topics_empty_input():
    assert normalize_topics("") == []
    assert normalize_topics(None) == []
    assert normalize_topics("   \n ") == []


def test_topics_truncated_to_ten():
    raw = json.dumps([f"Topic {i}" for i in range(15)])
    topics = normalize_topics(raw)
    assert len(topics) == MAX_TOPICS
    assert topics[0] == "Topic 0"


def test_questions_accept_either_answer_key():
    raw = json.dumps([
        {"question": "One?", "options": ["a", "b", "c", "d"], "correctOptionIndex": 1},
        {"question": "Two?", "options": ["a", "b", "c", "d"], "correctAnswer": 2, "explanation": "why"},
    ])
    questions = normalize_questions(raw, id_factory=_counter())
    assert [q.correct_option_index for q in questions] == [1, 2]
    assert [q.id for q in questions] == ["id1", "id2"]
    assert questions[1].explanation == "why"


def test_questions_drop_malformed_keep_siblings():
    raw = json.dumps([
        {"question": "Three options", "options": ["a", "b", "c"], "correctOptionIndex": 0},
        {"question": "Good", "options": ["a", "b", "c", "d"], "correctOptionIndex": 3},
        {"question": "Index too big", "options": ["a", "b", "c", "d"], "correctOptionIndex": 4},
        {"question": "Negative", "options": ["a", "b", "c", "d"], "correctOptionIndex": -1},
        {"question": "String index", "options": ["a", "b", "c", "d"], "correctOptionIndex": "1"},
        {"question": "Bool index", "options": ["a", "b", "c", "d"], "correctOptionIndex": True},
        {"question": "Empty option", "options": ["a", "", "c", "d"], "correctOptionIndex": 0},
        {"question": "", "options": ["a", "b", "c", "d"], "correctOptionIndex": 0},
        "not an object",
    ])
    questions = normalize_questions(raw)
    assert [q.question for q in questions] == ["Good"]


def test_questions_without_json_return_empty():
    assert normalize_questions("1. What is a loop?\nA) x B) y") == []
    assert normalize_questions("[not json at all]") == []
    assert normalize_questions("") == []


def test_questions_get_fresh_unique_ids():
    raw = json.dumps([
        {"id": "model-id", "question": f"Q{i}", "options": ["a", "b", "c", "d"], "correctOptionIndex": 0}
        for i in range(3)
    ])
    ids = [q.id for q in normalize_questions(raw)]
    assert len(set(ids)) == 3
    assert "model-id" not in ids


def test_question_entries_accept_stored_field_name():
    entries = [{"question": "Q", "options": ["a", "b", "c", "d"], "correct_option_index": 2}]
    assert normalize_question_entries(entries)[0].correct_option_index == 2
