from datetime import datetime, timezone

from services.grading_service import QuizScorer, build_answer_sheet, find_unanswered, review_items, score_quiz
from services.models import UNANSWERED, Quiz
from services.response_normalizer import normalize_questions

FIXED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_all_correct_scores_full_marks(sample_quiz):
    answers = {q.id: q.correct_option_index for q in sample_quiz.questions}
    result = QuizScorer(clock=lambda: FIXED).score(sample_quiz, answers, "student1")
    assert result.score == 3
    assert result.total_questions == 3
    assert result.quiz_id == "quiz1"
    assert result.student_id == "student1"
    assert result.completed_at == FIXED


def test_all_wrong_or_unanswered_scores_zero(sample_quiz):
    wrong = {q.id: (q.correct_option_index + 1) % 4 for q in sample_quiz.questions}
    assert score_quiz(sample_quiz, wrong, "s").score == 0
    blank = {q.id: UNANSWERED for q in sample_quiz.questions}
    assert score_quiz(sample_quiz, blank, "s").score == 0


def test_partial_score(sample_quiz):
    result = score_quiz(sample_quiz, {"q1": 3, "q2": 0, "q3": 1}, "s")
    assert result.score == 2
    assert result.answers == {"q1": 3, "q2": 0, "q3": 1}


def test_missing_and_invalid_answers_count_as_unanswered(sample_quiz):
    sheet = build_answer_sheet(sample_quiz, {"q1": "3", "q2": 9, "extra": 1})
    assert sheet == {"q1": 3, "q2": UNANSWERED, "q3": UNANSWERED}
    assert score_quiz(sample_quiz, {"q1": "3", "q2": 9}, "s").score == 1


def test_find_unanswered_in_quiz_order(sample_quiz):
    assert find_unanswered(sample_quiz, {"q2": 1}) == ["q1", "q3"]
    assert find_unanswered(sample_quiz, {"q1": 0, "q2": 0, "q3": 0}) == []
    assert find_unanswered(sample_quiz, None) == ["q1", "q2", "q3"]


def test_normalized_quiz_scored_with_own_key_is_perfect():
    raw = '[{"question": "A?", "options": ["1","2","3","4"], "correctAnswer": 2},' \
          ' {"question": "B?", "options": ["1","2","3","4"], "correctOptionIndex": 0}]'
    quiz = Quiz(id="qz", title="t", created_by="t1", questions=normalize_questions(raw))
    answers = {q.id: q.correct_option_index for q in quiz.questions}
    result = score_quiz(quiz, answers, "s")
    assert result.score == result.total_questions == 2


def test_review_items(sample_quiz):
    result = score_quiz(sample_quiz, {"q1": 3, "q2": 0, "q3": 1}, "s")
    items = review_items(sample_quiz, result)
    assert [i["is_correct"] for i in items] == [True, False, True]
    assert items[1]["selected_option_index"] == 0
    assert items[1]["correct_option_index"] == 2
