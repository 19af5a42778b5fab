from io import BytesIO

from conftest import questions_json


def _register(client, name, email, role, teacher_id=None):
    resp = client.post("/api/auth/register", json={
        "name": name, "email": email, "role": role, "password": "secret", "teacher_id": teacher_id,
    })
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["user"]


def _login(client, email, role=None):
    return client.post("/api/auth/login", json={"email": email, "password": "secret", "role": role})


def _curriculum(client):
    resp = client.post("/api/teacher/curriculums", json={
        "title": "Intro to CS",
        "description": "Basics",
        "modules": [{"title": "Programming", "topics": ["Variables", "Loops"]}],
    })
    assert resp.status_code == 201
    return resp.get_json()["curriculum"]


def test_health(client):
    resp = client.get("/api/health")
    assert resp.get_json() == {"ok": True, "store": "local"}


def test_llm_status(client):
    assert client.get("/api/llm/status").get_json()["key_available"] is True


def test_auth_flow(client):
    teacher = _register(client, "John", "john@example.com", "teacher")
    assert "password_hash" not in teacher

    assert client.get("/api/auth/me").status_code == 401
    assert _login(client, "john@example.com").status_code == 200
    assert client.get("/api/auth/me").get_json()["user"]["id"] == teacher["id"]

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_login_failures(client):
    _register(client, "John", "john@example.com", "teacher")
    assert _login(client, "nobody@example.com").status_code == 401
    bad = client.post("/api/auth/login", json={"email": "john@example.com", "password": "wrong"})
    assert bad.status_code == 401
    assert _login(client, "john@example.com", role="student").status_code == 401


def test_register_validation(client):
    resp = client.post("/api/auth/register", json={"name": "X", "email": "x@example.com", "role": "student"})
    assert resp.status_code == 400
    _register(client, "John", "john@example.com", "teacher")
    dup = client.post("/api/auth/register", json={
        "name": "J", "email": "john@example.com", "role": "teacher", "password": "secret",
    })
    assert dup.status_code == 409


def test_role_guards(client):
    teacher = _register(client, "John", "john@example.com", "teacher")
    _register(client, "Alice", "alice@example.com", "student", teacher["id"])

    assert client.get("/api/teacher/dashboard").status_code == 401
    _login(client, "alice@example.com")
    assert client.get("/api/teacher/dashboard").status_code == 403
    assert client.get("/api/student/dashboard").status_code == 200


def test_topic_extraction(client, fake_groq):
    _register(client, "John", "john@example.com", "teacher")
    _login(client, "john@example.com")

    fake_groq.replies.append('["Variables", "Loops"]')
    resp = client.post("/api/teacher/topics/extract", json={
        "curriculum_title": "CS", "module_title": "Basics", "description": "Variables and loops in Python",
    })
    assert resp.status_code == 200
    assert [t["title"] for t in resp.get_json()["topics"]] == ["Variables", "Loops"]

    fake_groq.replies.append("no idea")
    resp = client.post("/api/teacher/topics/extract", json={
        "curriculum_title": "CS", "module_title": "Basics", "description": "Variables and loops in Python",
    })
    assert resp.status_code == 422

    short = client.post("/api/teacher/topics/extract", json={"description": "tiny"})
    assert short.status_code == 400


def test_generation_failure_is_reported(client, fake_groq):
    _register(client, "John", "john@example.com", "teacher")
    _login(client, "john@example.com")
    curriculum = _curriculum(client)
    topic_ids = [t["id"] for t in curriculum["modules"][0]["topics"]]

    fake_groq.replies.append("not json")
    resp = client.post("/api/teacher/quizzes/generate", json={
        "curriculum_id": curriculum["id"], "topic_ids": topic_ids,
    })
    assert resp.status_code == 422

    missing = client.post("/api/teacher/quizzes/generate", json={"curriculum_id": curriculum["id"]})
    assert missing.status_code == 400


def test_quiz_round_trip(client, fake_groq):
    teacher = _register(client, "John", "john@example.com", "teacher")
    alice = _register(client, "Alice", "alice@example.com", "student", teacher["id"])
    _register(client, "Bob", "bob@example.com", "student", teacher["id"])

    _login(client, "john@example.com", role="teacher")
    curriculum = _curriculum(client)
    topic_ids = [t["id"] for t in curriculum["modules"][0]["topics"]]

    fake_groq.replies.append(questions_json(3))
    generated = client.post("/api/teacher/quizzes/generate", json={
        "curriculum_id": curriculum["id"], "topic_ids": topic_ids, "num_questions": 3, "language": "English",
    })
    assert generated.status_code == 200
    questions = generated.get_json()["questions"]
    assert len(questions) == 3

    created = client.post("/api/teacher/quizzes", json={
        "title": "Programming quiz",
        "questions": questions,
        "assigned_to": [alice["id"]],
        "curriculum_id": curriculum["id"],
        "topic_ids": topic_ids,
    })
    assert created.status_code == 201
    quiz_id = created.get_json()["quiz_id"]

    key = {q["id"]: q["correct_option_index"] for q in client.get(f"/api/teacher/quizzes/{quiz_id}").get_json()["quiz"]["questions"]}

    _login(client, "alice@example.com", role="student")
    dashboard = client.get("/api/student/dashboard").get_json()
    assert [q["id"] for q in dashboard["pending"]] == [quiz_id]
    assert dashboard["overall_score"] == 0

    view = client.get(f"/api/student/quizzes/{quiz_id}").get_json()
    assert all("correct_option_index" not in q for q in view["quiz"]["questions"])
    assert set(view["answers"].values()) == {-1}

    partial = client.post(f"/api/student/quizzes/{quiz_id}/submit", json={"answers": view["answers"]})
    assert partial.status_code == 400
    assert sorted(partial.get_json()["unanswered"]) == sorted(key)

    answers = dict(key)
    first = next(iter(answers))
    answers[first] = (answers[first] + 1) % 4
    submitted = client.post(f"/api/student/quizzes/{quiz_id}/submit", json={"answers": answers})
    assert submitted.status_code == 201
    assert submitted.get_json()["result"]["score"] == 2
    assert submitted.get_json()["result"]["percentage"] == 67

    again = client.post(f"/api/student/quizzes/{quiz_id}/submit", json={"answers": answers})
    assert again.status_code == 409

    result = client.get(f"/api/student/results/{quiz_id}").get_json()
    assert result["correct"] == 2
    assert result["incorrect"] == 1
    assert [item["is_correct"] for item in result["review"]].count(False) == 1

    _login(client, "john@example.com")
    results = client.get(f"/api/teacher/quizzes/{quiz_id}/results").get_json()
    assert results["summary"] == {"attempts": 1, "average": 67, "best": 67}
    assert results["results"][0]["student_name"] == "Alice"

    dashboard = client.get("/api/teacher/dashboard").get_json()
    assert dashboard["class"] == {"average": 34, "max": 67, "completion_rate": 50}


def test_student_cannot_open_unassigned_quiz(client, fake_groq):
    teacher = _register(client, "John", "john@example.com", "teacher")
    alice = _register(client, "Alice", "alice@example.com", "student", teacher["id"])
    _register(client, "Bob", "bob@example.com", "student", teacher["id"])

    _login(client, "john@example.com")
    created = client.post("/api/teacher/quizzes", json={
        "title": "Only Alice",
        "questions": [{"question": "Q?", "options": ["a", "b", "c", "d"], "correct_option_index": 1}],
        "assigned_to": [alice["id"]],
    })
    quiz_id = created.get_json()["quiz_id"]

    _login(client, "bob@example.com")
    assert client.get(f"/api/student/quizzes/{quiz_id}").status_code == 403
    assert client.get("/api/student/quizzes/missing").status_code == 404


def test_topic_extraction_from_uploaded_file(client, fake_groq):
    _register(client, "John", "john@example.com", "teacher")
    _login(client, "john@example.com")

    fake_groq.replies.append("1. Cells\n2. Photosynthesis")
    resp = client.post(
        "/api/teacher/topics/extract",
        data={
            "curriculum_title": "Biology",
            "module_title": "Plants",
            "file": (BytesIO(b"Plant cells use photosynthesis to make food."), "plants.txt", "text/plain"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert [t["title"] for t in resp.get_json()["topics"]] == ["Cells", "Photosynthesis"]


def test_register_requires_password(client):
    for password in (None, "", "abc", 123456):
        resp = client.post("/api/auth/register", json={
            "name": "Victim", "email": "victim@example.com", "role": "teacher", "password": password,
        })
        assert resp.status_code == 400

    _register(client, "Victim", "victim@example.com", "teacher")
    client.post("/api/auth/logout")
    resp = client.post("/api/auth/login", json={"email": "victim@example.com", "password": "anything"})
    assert resp.status_code == 401
    assert client.post("/api/auth/login", json={"email": "victim@example.com"}).status_code == 401


def test_malformed_curriculum_payloads_are_rejected(client):
    _register(client, "John", "john@example.com", "teacher")
    _login(client, "john@example.com")

    payloads = [
        {"title": "x", "modules": ["m"]},
        {"title": "x", "modules": "m"},
        {"title": "x", "modules": [{"title": "M", "topics": [5]}]},
        {"title": "x", "modules": [{"title": "M", "topics": "Loops"}]},
        {"title": "x", "modules": [{"title": 7, "topics": ["Loops"]}]},
        {"title": 5, "modules": [{"title": "M", "topics": ["Loops"]}]},
        {"title": "x", "description": ["d"], "modules": [{"title": "M", "topics": ["Loops"]}]},
    ]
    for payload in payloads:
        resp = client.post("/api/teacher/curriculums", json=payload)
        assert resp.status_code == 400, payload

    assert client.post("/api/teacher/curriculums", json=["not", "an", "object"]).status_code == 400
    assert client.post("/api/teacher/topics/extract", json={"description": 12345678901}).status_code == 400


def test_malformed_quiz_payloads_are_rejected(client, fake_groq):
    teacher = _register(client, "John", "john@example.com", "teacher")
    alice = _register(client, "Alice", "alice@example.com", "student", teacher["id"])
    _login(client, "john@example.com")
    curriculum = _curriculum(client)
    topic_ids = [t["id"] for t in curriculum["modules"][0]["topics"]]

    generate = [
        {"curriculum_id": curriculum["id"], "topic_ids": topic_ids, "language": 5},
        {"curriculum_id": curriculum["id"], "topic_ids": [{"id": "x"}]},
        {"curriculum_id": 42, "topic_ids": topic_ids},
    ]
    for payload in generate:
        assert client.post("/api/teacher/quizzes/generate", json=payload).status_code == 400, payload

    question = {"question": "Q?", "options": ["a", "b", "c", "d"], "correct_option_index": 0}
    create = [
        {"title": "T", "questions": [question], "assigned_to": alice["id"]},
        {"title": "T", "questions": [question], "assigned_to": [alice["id"], 3]},
        {"title": ["T"], "questions": [question], "assigned_to": [alice["id"]]},
        {"title": "T", "questions": [question], "assigned_to": [alice["id"]], "language": 5},
        {"title": "T", "questions": "Q?", "assigned_to": [alice["id"]]},
    ]
    for payload in create:
        assert client.post("/api/teacher/quizzes", json=payload).status_code == 400, payload
    assert fake_groq.calls == []
