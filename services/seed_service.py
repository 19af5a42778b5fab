"""Demo data for a fresh store (``flask seed``)."""

import logging
from typing import Any, Dict, List

from werkzeug.security import generate_password_hash

from services.db import CURRICULUMS, QUIZZES, RESULTS, USERS, get_store
from services.models import result_key, utc_now

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.svg?height=200&width=200"
# every demo account signs in with this password
DEMO_PASSWORD = "password123"


def _teacher(id_: str, name: str, email: str, students: List[str], curriculums: List[str]) -> Dict[str, Any]:
    return {
        "id": id_, "name": name, "email": email, "role": "teacher",
        "profile_image": PLACEHOLDER_IMAGE, "students": students, "curriculums": curriculums,
    }


def _student(id_: str, name: str, email: str, teacher: str, assigned: List[str]) -> Dict[str, Any]:
    return {
        "id": id_, "name": name, "email": email, "role": "student",
        "profile_image": PLACEHOLDER_IMAGE, "teacher": teacher,
        "assigned_quizzes": assigned, "completed_quizzes": {},
    }


def _module(id_: str, title: str, description: str, topics: List[tuple]) -> Dict[str, Any]:
    return {
        "id": id_, "title": title, "description": description,
        "topics": [{"id": t[0], "title": t[1], "description": t[2]} for t in topics],
    }


def _question(id_: str, question: str, options: List[str], correct: int) -> Dict[str, Any]:
    return {"id": id_, "question": question, "options": options, "correct_option_index": correct, "explanation": ""}


TEACHERS = [
    _teacher("teacher1", "John Smith", "teacher@example.com",
             ["student1", "student2", "student3"], ["curriculum1", "curriculum2"]),
    _teacher("teacher2", "Jane Doe", "jane.doe@example.com", ["student4", "student5"], ["curriculum3"]),
]

STUDENTS = [
    _student("student1", "Alice Johnson", "student@example.com", "teacher1", ["quiz1", "quiz2"]),
    _student("student2", "Bob Williams", "bob.williams@example.com", "teacher1", ["quiz1"]),
    _student("student3", "Charlie Brown", "charlie.brown@example.com", "teacher1", ["quiz2"]),
    _student("student4", "Diana Miller", "diana.miller@example.com", "teacher2", ["quiz3"]),
    _student("student5", "Ethan Davis", "ethan.davis@example.com", "teacher2", ["quiz3"]),
]

CURRICULA = [
    {
        "id": "curriculum1", "teacher_id": "teacher1",
        "title": "Introduction to Computer Science",
        "description": "A beginner's guide to computer science concepts",
        "modules": [
            _module("module1", "Programming Basics", "Introduction to programming concepts", [
                ("topic1", "Variables and Data Types", "Understanding variables and different data types"),
                ("topic2", "Control Structures", "Loops and conditional statements"),
            ]),
            _module("module2", "Data Structures", "Common data structures in programming", [
                ("topic3", "Arrays and Lists", "Working with sequential data"),
                ("topic4", "Maps and Sets", "Key-value pairs and unique collections"),
            ]),
        ],
    },
    {
        "id": "curriculum2", "teacher_id": "teacher1",
        "title": "Web Development Fundamentals",
        "description": "Learn the basics of web development",
        "modules": [
            _module("module3", "HTML & CSS", "Building blocks of web pages", [
                ("topic5", "HTML Structure", "Creating the structure of web pages"),
                ("topic6", "CSS Styling", "Styling web pages with CSS"),
            ]),
            _module("module4", "JavaScript Basics", "Introduction to JavaScript programming", [
                ("topic7", "JavaScript Syntax", "Basic syntax and concepts"),
                ("topic8", "DOM Manipulation", "Interacting with the Document Object Model"),
            ]),
        ],
    },
    {
        "id": "curriculum3", "teacher_id": "teacher2",
        "title": "Mathematics for Computer Science",
        "description": "Essential math concepts for computer science",
        "modules": [
            _module("module5", "Discrete Mathematics", "Mathematical structures for computer science", [
                ("topic9", "Set Theory", "Understanding sets and operations"),
                ("topic10", "Graph Theory", "Graphs and their applications"),
            ]),
        ],
    },
]

QUIZ_SEED = [
    {
        "id": "quiz1", "title": "Variables and Data Types Quiz",
        "description": "Test your knowledge of variables and data types",
        "language": "English", "created_by": "teacher1", "assigned_to": ["student1", "student2"],
        "curriculum_id": "curriculum1", "topics": [{"id": "topic1", "title": "Variables and Data Types"}],
        "questions": [
            _question("q1", "Which of the following is not a primitive data type in JavaScript?",
                      ["String", "Number", "Boolean", "Array"], 3),
            _question("q2", "What is the result of typeof null in JavaScript?",
                      ["null", "undefined", "object", "number"], 2),
            _question("q3", "Which operator is used for strict equality comparison in JavaScript?",
                      ["==", "===", "=", "!="], 1),
            _question("q4", "What will be the output of console.log(10 + '20')?",
                      ["30", "1020", "Error", "undefined"], 1),
            _question("q5", "Which method is used to convert a string to an integer in JavaScript?",
                      ["parseInt()", "parseFloat()", "toString()", "toFixed()"], 0),
        ],
    },
    {
        "id": "quiz2", "title": "HTML Structure Quiz",
        "description": "Test your knowledge of HTML structure",
        "language": "English", "created_by": "teacher1", "assigned_to": ["student1", "student3"],
        "curriculum_id": "curriculum2", "topics": [{"id": "topic5", "title": "HTML Structure"}],
        "questions": [
            _question("q6", "Which HTML tag is used to define an unordered list?", ["<ol>", "<ul>", "<li>", "<dl>"], 1),
            _question("q7", "Which attribute is used to specify a unique identifier for an HTML element?",
                      ["class", "name", "id", "src"], 2),
            _question("q8", "Which HTML element is used to define the title of a document?",
                      ["<meta>", "<head>", "<title>", "<header>"], 2),
            _question("q9", "Which HTML tag is used to insert a line break?",
                      ["<lb>", "<break>", "<br>", "<newline>"], 2),
            _question("q10", "Which HTML element is used to define emphasized text?",
                      ["<i>", "<em>", "<strong>", "<b>"], 1),
        ],
    },
    {
        "id": "quiz3", "title": "Set Theory Quiz",
        "description": "Test your knowledge of set theory",
        "language": "English", "created_by": "teacher2", "assigned_to": ["student4", "student5"],
        "curriculum_id": "curriculum3", "topics": [{"id": "topic9", "title": "Set Theory"}],
        "questions": [
            _question("q11", "What is the symbol for the union of sets?", ["∩", "∪", "⊆", "⊂"], 1),
            _question("q12", "What is the cardinality of the empty set?", ["0", "1", "Undefined", "Infinite"], 0),
            _question("q13", "If A = {1, 2, 3} and B = {3, 4, 5}, what is A ∩ B?",
                      ["{}", "{1, 2, 3, 4, 5}", "{3}", "{1, 2, 4, 5}"], 2),
            _question("q14", "What is the power set of {a, b}?",
                      ["{∅, {a}, {b}, {a, b}}", "{a, b}", "{∅, a, b, {a, b}}", "{a, b, {a, b}}"], 0),
            _question("q15", "If A ⊆ B and B ⊆ A, then:", ["A = B", "A ≠ B", "A ∩ B = ∅", "A ∪ B = ∅"], 0),
        ],
    },
]


def seed_database() -> bool:
    """Load the demo data unless the store already has users. Returns True if seeded."""
    store = get_store()
    if store.query(USERS):
        logger.info("Database already has data, skipping seed")
        return False

    now = utc_now()
    batch = store.batch()
    password_hash = generate_password_hash(DEMO_PASSWORD)
    for doc in TEACHERS + STUDENTS:
        batch.set(USERS, doc["id"], dict(doc, password_hash=password_hash))
    for doc in CURRICULA:
        batch.set(CURRICULUMS, doc["id"], dict(doc, created_at=now))
    for doc in QUIZ_SEED:
        batch.set(QUIZZES, doc["id"], dict(doc, created_at=now))

    # Alice already finished the first quiz: 4 of 5
    alice_result = {
        "quiz_id": "quiz1", "student_id": "student1", "score": 4, "total_questions": 5,
        "answers": {"q1": 3, "q2": 2, "q3": 1, "q4": 1, "q5": 1}, "completed_at": now,
    }
    batch.set(RESULTS, result_key("quiz1", "student1"), alice_result)
    batch.update(USERS, "student1", {"completed_quizzes.quiz1": alice_result})

    batch.commit()
    logger.info("Database seeded successfully!")
    return True
