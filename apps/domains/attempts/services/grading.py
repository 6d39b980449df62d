# PATH: apps/domains/attempts/services/grading.py
"""
Grading Engine (순수 함수, DB 접근 없음)

grade(questions, answers) → GradeOutcome

정책:
- 모든 문항 points 는 응답 여부와 무관하게 max_possible 에 합산
- multiple_choice: 선택 index == 정답 index → 만점, 아니면 0
- short_answer / code: 자동 0점 + needs_review
- unsupported / 깨진 문항: 0점, needs_review 아님 (unsupported 로 기록)
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from apps.shared.contracts.questions import (
    CodeQuestion,
    MultipleChoiceQuestion,
    Question,
    ShortAnswerQuestion,
    UnsupportedQuestion,
    parse_questions,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

QUESTION_VARIANTS = (MultipleChoiceQuestion, ShortAnswerQuestion, CodeQuestion, UnsupportedQuestion)


@dataclass(frozen=True)
class GradedAnswer:
    question_id: int
    question_text: str
    type: str
    candidate_answer: Any
    correct_answer: Any
    points_earned: Decimal
    max_points: Decimal
    is_correct: bool
    needs_review: bool
    unsupported: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "type": self.type,
            "candidate_answer": self.candidate_answer,
            "correct_answer": self.correct_answer,
            "points_earned": float(self.points_earned),
            "max_points": float(self.max_points),
            "is_correct": self.is_correct,
            "needs_review": self.needs_review,
            "unsupported": self.unsupported,
        }


@dataclass(frozen=True)
class GradeOutcome:
    earned: Decimal
    max_possible: Decimal
    graded_answers: List[GradedAnswer]
    needs_review: bool

    @property
    def percentage(self) -> Decimal:
        return compute_percentage(self.earned, self.max_possible)

    def passed(self, passing_score: Any) -> bool:
        return is_passed(raw_percentage(self.earned, self.max_possible), passing_score)


def to_decimal(v: Any) -> Decimal:
    if v is None or isinstance(v, bool):
        return ZERO
    try:
        d = Decimal(str(v))
    except (InvalidOperation, ValueError):
        return ZERO
    return d if d.is_finite() else ZERO


def raw_percentage(earned: Any, max_possible: Any) -> Decimal:
    earned_d = to_decimal(earned)
    max_d = to_decimal(max_possible)
    if max_d <= 0:
        return ZERO
    return earned_d / max_d * HUNDRED


def compute_percentage(earned: Any, max_possible: Any) -> Decimal:
    # 저장용 (0.01 HALF_UP)
    return raw_percentage(earned, max_possible).quantize(CENT, rounding=ROUND_HALF_UP)


def is_passed(percentage: Any, passing_score: Any) -> bool:
    """합격 판정은 반올림 전 값으로 한다. (66.666… 은 66.67 기준에 불합격)"""
    return to_decimal(percentage) >= to_decimal(passing_score)


def answers_by_question(entries: Any) -> Dict[int, Any]:
    """
    answer snapshot 목록 [{question_id, answer, ...}] → {question_id: answer}
    dict 로 들어오면 key 를 int 로 정규화만 한다.
    """
    out: Dict[int, Any] = {}
    if isinstance(entries, Mapping):
        for k, v in entries.items():
            try:
                out[int(k)] = v
            except (TypeError, ValueError):
                continue
        return out

    if not isinstance(entries, (list, tuple)):
        return out

    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        try:
            qid = int(entry.get("question_id"))
        except (TypeError, ValueError):
            continue
        out[qid] = entry.get("answer")
    return out


def _selected_index(answer: Any) -> Optional[int]:
    # int 또는 {"selected": int}
    if isinstance(answer, Mapping):
        answer = answer.get("selected")
    if isinstance(answer, bool):
        return None
    if isinstance(answer, int):
        return answer
    if isinstance(answer, str) and answer.strip().isdigit():
        return int(answer.strip())
    return None


def _grade_multiple_choice(q: MultipleChoiceQuestion, answer: Any) -> GradedAnswer:
    selected = _selected_index(answer)
    valid = selected is not None and 0 <= selected < len(q.options)
    is_correct = valid and selected == q.correct_answer

    return GradedAnswer(
        question_id=q.id,
        question_text=q.question,
        type=q.type,
        candidate_answer=q.options[selected] if valid else answer,
        correct_answer=q.options[q.correct_answer],
        points_earned=q.points if is_correct else ZERO,
        max_points=q.points,
        is_correct=is_correct,
        needs_review=False,
    )


def _grade_for_review(q: Question, answer: Any) -> GradedAnswer:
    return GradedAnswer(
        question_id=q.id,
        question_text=q.question,
        type=q.type,
        candidate_answer=answer,
        correct_answer=None,
        points_earned=ZERO,
        max_points=q.points,
        is_correct=False,
        needs_review=True,
    )


def _grade_unsupported(q: UnsupportedQuestion, answer: Any) -> GradedAnswer:
    return GradedAnswer(
        question_id=q.id,
        question_text=q.question,
        type=q.raw_type or q.type,
        candidate_answer=answer,
        correct_answer=None,
        points_earned=ZERO,
        max_points=q.points,
        is_correct=False,
        needs_review=False,
        unsupported=True,
    )


def grade_question(q: Question, answer: Any) -> GradedAnswer:
    if isinstance(q, MultipleChoiceQuestion):
        return _grade_multiple_choice(q, answer)
    if isinstance(q, (ShortAnswerQuestion, CodeQuestion)):
        return _grade_for_review(q, answer)
    if isinstance(q, UnsupportedQuestion):
        return _grade_unsupported(q, answer)
    raise TypeError(f"unknown question variant: {type(q).__name__}")


def grade(questions: Sequence[Any], answers: Any) -> GradeOutcome:
    if isinstance(questions, (list, tuple)) and all(isinstance(q, QUESTION_VARIANTS) for q in questions):
        parsed: List[Question] = list(questions)
    else:
        parsed = parse_questions(questions)

    by_qid = answers_by_question(answers)

    graded: List[GradedAnswer] = []
    earned = ZERO
    max_possible = ZERO

    for q in parsed:
        ga = grade_question(q, by_qid.get(q.id))
        graded.append(ga)
        earned += ga.points_earned
        max_possible += ga.max_points

    return GradeOutcome(
        earned=earned,
        max_possible=max_possible,
        graded_answers=graded,
        needs_review=any(ga.needs_review for ga in graded),
    )


def recompute(graded_answers: Sequence[Mapping[str, Any]]) -> Tuple[Decimal, Decimal, bool]:
    """
    저장된 graded_answers(dict 목록)로 합계 재계산 → (earned, max_possible, needs_review)
    """
    earned = ZERO
    max_possible = ZERO
    needs_review = False
    for ga in graded_answers or []:
        earned += to_decimal(ga.get("points_earned"))
        max_possible += to_decimal(ga.get("max_points"))
        needs_review = needs_review or bool(ga.get("needs_review"))
    return earned, max_possible, needs_review


def max_possible_score(questions: Sequence[Any]) -> Decimal:
    """응답과 무관한 만점 합계 (escaped / timeout 기록용)"""
    return grade(questions, []).max_possible
