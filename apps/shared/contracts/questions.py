# apps/shared/contracts/questions.py
"""
문항 JSON 계약 (tagged union)

저장 형태는 dict 목록(JSON) 그대로 두고, 채점/검증 시점에만
"type" 필드로 variant를 결정해 파싱한다.

- multiple_choice : options + correct_answer(index) → 자동 채점
- short_answer    : 주관식 → 항상 수동 채점 대상
- code            : 코드 작성 → 항상 수동 채점 대상
- 그 외 / 깨진 데이터 → UnsupportedQuestion (0점, 리뷰 대상 아님)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

MULTIPLE_CHOICE = "multiple_choice"
SHORT_ANSWER = "short_answer"
CODE = "code"

DEFAULT_POINTS = Decimal("1")

# 응시자에게 내려가면 안 되는 키
PRIVATE_KEYS = ("correct_answer", "explanation", "expected_keywords")


@dataclass(frozen=True)
class MultipleChoiceQuestion:
    id: int
    question: str
    points: Decimal
    options: Tuple[str, ...]
    correct_answer: int
    explanation: str = ""
    type: str = MULTIPLE_CHOICE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "points": float(self.points),
            "options": list(self.options),
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class ShortAnswerQuestion:
    id: int
    question: str
    points: Decimal
    expected_keywords: Tuple[str, ...] = ()
    min_words: Optional[int] = None
    type: str = SHORT_ANSWER

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "points": float(self.points),
            "expected_keywords": list(self.expected_keywords),
        }
        if self.min_words is not None:
            d["min_words"] = self.min_words
        return d


@dataclass(frozen=True)
class CodeQuestion:
    id: int
    question: str
    points: Decimal
    language: str = ""
    starter_code: str = ""
    test_cases: Tuple[Any, ...] = field(default_factory=tuple)
    type: str = CODE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "points": float(self.points),
            "language": self.language,
            "starter_code": self.starter_code,
            "test_cases": list(self.test_cases),
        }


@dataclass(frozen=True)
class UnsupportedQuestion:
    id: int
    question: str
    points: Decimal
    raw_type: str = ""
    reason: str = "unsupported_type"
    type: str = "unsupported"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.raw_type or self.type,
            "question": self.question,
            "points": float(self.points),
        }


Question = Union[MultipleChoiceQuestion, ShortAnswerQuestion, CodeQuestion, UnsupportedQuestion]


def _int_or_none(v: Any) -> Optional[int]:
    if isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v.strip().lstrip("-").isdigit():
        return int(v.strip())
    return None


def parse_points(v: Any) -> Decimal:
    if v is None or isinstance(v, bool):
        return DEFAULT_POINTS
    try:
        p = Decimal(str(v))
    except (InvalidOperation, ValueError):
        return DEFAULT_POINTS
    if not p.is_finite() or p < 0:
        return DEFAULT_POINTS
    return p


def _str_tuple(v: Any) -> Tuple[str, ...]:
    if not isinstance(v, (list, tuple)):
        return ()
    return tuple(str(x) for x in v if x is not None)


def parse_question(raw: Any, index: int) -> Question:
    """
    raw dict → Question variant.
    question id = max(raw.id, index + 1)  (id 누락/중복 0 방어)
    """
    if not isinstance(raw, dict):
        return UnsupportedQuestion(id=index + 1, question="", points=Decimal("0"), reason="malformed")

    qid = max(_int_or_none(raw.get("id")) or 0, index + 1)
    text = str(raw.get("question") or "")
    points = parse_points(raw.get("points"))
    qtype = str(raw.get("type") or "").strip().lower()

    if qtype == MULTIPLE_CHOICE:
        options = _str_tuple(raw.get("options"))
        correct = _int_or_none(raw.get("correct_answer"))
        if not options or correct is None or not (0 <= correct < len(options)):
            return UnsupportedQuestion(id=qid, question=text, points=points, raw_type=qtype, reason="malformed")
        return MultipleChoiceQuestion(
            id=qid,
            question=text,
            points=points,
            options=options,
            correct_answer=correct,
            explanation=str(raw.get("explanation") or ""),
        )

    if qtype == SHORT_ANSWER:
        return ShortAnswerQuestion(
            id=qid,
            question=text,
            points=points,
            expected_keywords=_str_tuple(raw.get("expected_keywords")),
            min_words=_int_or_none(raw.get("min_words")),
        )

    if qtype == CODE:
        cases = raw.get("test_cases")
        return CodeQuestion(
            id=qid,
            question=text,
            points=points,
            language=str(raw.get("language") or ""),
            starter_code=str(raw.get("starter_code") or ""),
            test_cases=tuple(cases) if isinstance(cases, (list, tuple)) else (),
        )

    return UnsupportedQuestion(id=qid, question=text, points=points, raw_type=qtype)


def parse_questions(raw_list: Any) -> List[Question]:
    if not isinstance(raw_list, (list, tuple)):
        return []
    return [parse_question(raw, idx) for idx, raw in enumerate(raw_list)]


def sanitize_questions(raw_list: Any, *, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    외부(AI 등)에서 들어온 문항 정리: 지원 타입 + 텍스트 있는 것만 남기고 id 재부여.
    """
    out: List[Dict[str, Any]] = []
    for q in parse_questions(raw_list):
        if isinstance(q, UnsupportedQuestion) or not q.question.strip():
            continue
        d = q.to_dict()
        d["id"] = len(out) + 1
        out.append(d)
        if limit is not None and len(out) >= limit:
            break
    return out


def public_question(raw: Any, index: int) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        return {"id": index + 1}
    d = {k: v for k, v in raw.items() if k not in PRIVATE_KEYS}
    d["id"] = max(_int_or_none(raw.get("id")) or 0, index + 1)
    return d


def public_questions(raw_list: Sequence[Any]) -> List[Dict[str, Any]]:
    if not isinstance(raw_list, (list, tuple)):
        return []
    return [public_question(raw, idx) for idx, raw in enumerate(raw_list)]
