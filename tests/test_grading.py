from decimal import Decimal

import pytest

from apps.domains.attempts.services.grading import (
    answers_by_question,
    compute_percentage,
    grade,
    grade_question,
    is_passed,
    recompute,
)
from apps.shared.contracts.questions import (
    MultipleChoiceQuestion,
    UnsupportedQuestion,
    parse_question,
    public_questions,
    sanitize_questions,
)
from tests.factories import CODE_QUESTION, MCQ_QUESTION, OPEN_QUESTION


class TestMultipleChoiceGrading:
    def test_correct_index_earns_full_points(self):
        outcome = grade([MCQ_QUESTION], [{"question_id": 1, "answer": 1}])

        assert outcome.earned == Decimal("1")
        assert outcome.max_possible == Decimal("1")
        assert outcome.percentage == Decimal("100.00")
        assert outcome.needs_review is False

        ga = outcome.graded_answers[0]
        assert ga.is_correct is True
        assert ga.candidate_answer == "404"
        assert ga.correct_answer == "404"

    def test_wrong_index_earns_zero(self):
        outcome = grade([MCQ_QUESTION], [{"question_id": 1, "answer": 0}])

        assert outcome.earned == Decimal("0")
        assert outcome.graded_answers[0].is_correct is False
        assert outcome.graded_answers[0].candidate_answer == "200"

    def test_selected_object_form_is_accepted(self):
        outcome = grade([MCQ_QUESTION], {1: {"selected": 1}})
        assert outcome.graded_answers[0].is_correct is True

    def test_out_of_range_selection_keeps_raw_answer(self):
        outcome = grade([MCQ_QUESTION], [{"question_id": 1, "answer": 7}])

        ga = outcome.graded_answers[0]
        assert ga.is_correct is False
        assert ga.candidate_answer == 7
        assert ga.points_earned == Decimal("0")

    def test_unanswered_question_still_counts_toward_max(self):
        outcome = grade([MCQ_QUESTION, {**MCQ_QUESTION, "id": 2, "points": 4}], [{"question_id": 1, "answer": 1}])

        assert outcome.earned == Decimal("1")
        assert outcome.max_possible == Decimal("5")
        assert outcome.percentage == Decimal("20.00")


class TestReviewAndUnsupported:
    def test_open_ended_is_flagged_for_review(self):
        outcome = grade([MCQ_QUESTION, OPEN_QUESTION, CODE_QUESTION], [
            {"question_id": 1, "answer": 1},
            {"question_id": 2, "answer": "an index is a b-tree"},
        ])

        assert outcome.needs_review is True
        assert outcome.earned == Decimal("1")
        assert outcome.max_possible == Decimal("6")

        by_id = {ga.question_id: ga for ga in outcome.graded_answers}
        assert by_id[2].needs_review is True
        assert by_id[2].points_earned == Decimal("0")
        assert by_id[3].needs_review is True
        assert by_id[3].candidate_answer is None

    def test_unknown_type_scores_zero_without_review(self):
        outcome = grade([{"id": 1, "type": "essay_v2", "question": "?", "points": 2}], [])

        ga = outcome.graded_answers[0]
        assert outcome.needs_review is False
        assert ga.unsupported is True
        assert ga.type == "essay_v2"
        assert outcome.max_possible == Decimal("2")

    def test_malformed_multiple_choice_is_unsupported(self):
        q = parse_question({"id": 1, "type": "multiple_choice", "question": "?", "options": ["a"], "correct_answer": 3}, 0)

        assert isinstance(q, UnsupportedQuestion)
        assert q.reason == "malformed"

    def test_grade_question_rejects_unknown_variant(self):
        with pytest.raises(TypeError):
            grade_question(object(), None)

    def test_earned_never_exceeds_max(self):
        questions = [MCQ_QUESTION, OPEN_QUESTION, {"type": "other"}]
        outcome = grade(questions, {1: 1, 2: "x", 3: "y"})
        assert outcome.earned <= outcome.max_possible


class TestPercentageAndPassing:
    def test_zero_max_yields_zero_percentage(self):
        assert compute_percentage(0, 0) == Decimal("0.00")
        assert grade([], []).percentage == Decimal("0.00")

    def test_rounds_half_up_to_two_decimals(self):
        assert compute_percentage(1, 3) == Decimal("33.33")
        assert compute_percentage(2, 3) == Decimal("66.67")

    def test_passing_is_inclusive(self):
        assert is_passed(Decimal("70.00"), 70) is True
        assert is_passed(Decimal("69.99"), 70) is False

    def test_passing_compares_unrounded_percentage(self):
        questions = [dict(MCQ_QUESTION, id=i) for i in (1, 2, 3)]

        outcome = grade(questions, {1: 1, 2: 1, 3: 0})

        assert outcome.percentage == Decimal("66.67")
        assert outcome.passed(Decimal("66.67")) is False
        assert outcome.passed(Decimal("66.66")) is True


class TestQuestionContracts:
    def test_question_id_never_below_position(self):
        q = parse_question({"type": "multiple_choice", "question": "?", "options": ["a", "b"], "correct_answer": 0}, 2)
        assert isinstance(q, MultipleChoiceQuestion)
        assert q.id == 3

    def test_missing_points_default_to_one(self):
        q = parse_question({"id": 1, "type": "short_answer", "question": "?"}, 0)
        assert q.points == Decimal("1")

    def test_public_questions_strip_answer_keys(self):
        out = public_questions([MCQ_QUESTION, OPEN_QUESTION])

        assert "correct_answer" not in out[0]
        assert "explanation" not in out[0]
        assert "expected_keywords" not in out[1]
        assert out[0]["options"] == ["200", "404", "500"]

    def test_sanitize_drops_invalid_and_renumbers(self):
        raw = [
            {"id": 9, "type": "multiple_choice", "question": "ok", "options": ["a", "b"], "correct_answer": 1},
            {"id": 10, "type": "multiple_choice", "question": "broken", "options": []},
            {"id": 11, "type": "short_answer", "question": "   "},
            {"id": 12, "type": "code", "question": "write code"},
        ]
        out = sanitize_questions(raw)

        assert [q["id"] for q in out] == [1, 2]
        assert [q["type"] for q in out] == ["multiple_choice", "code"]

    def test_sanitize_respects_limit(self):
        raw = [{"type": "short_answer", "question": f"q{i}"} for i in range(5)]
        assert len(sanitize_questions(raw, limit=2)) == 2


class TestAnswerHelpers:
    def test_answers_by_question_from_list(self):
        entries = [{"question_id": 1, "answer": "a"}, {"question_id": "2", "answer": "b"}, "junk"]
        assert answers_by_question(entries) == {1: "a", 2: "b"}

    def test_answers_by_question_from_mapping(self):
        assert answers_by_question({"1": 0, "x": 1}) == {1: 0}

    def test_recompute_from_stored_graded_answers(self):
        earned, max_possible, needs_review = recompute([
            {"points_earned": 1.0, "max_points": 1.0, "needs_review": False},
            {"points_earned": 1.5, "max_points": 2.0, "needs_review": True},
        ])

        assert earned == Decimal("2.5")
        assert max_possible == Decimal("3.0")
        assert needs_review is True
