# PATH: apps/domains/exams/services/exam_store.py
"""
Exam 접근자 (attempts / ai 도메인이 사용하는 좁은 인터페이스)
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.api.common.exceptions import NotFoundError
from apps.domains.exams.models import Exam


class ExamNotFound(NotFoundError):
    code = "test_not_found"
    default_message = "Test not found."


def get_exam(exam_id: int, *, active_only: bool = False) -> Exam:
    qs = Exam.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    exam = qs.filter(id=int(exam_id)).first()
    if exam is None:
        raise ExamNotFound()
    return exam


def create_exam(
    *,
    title: str,
    questions: Optional[List[Dict[str, Any]]] = None,
    description: str = "",
    instructions: str = "",
    exam_type: str = Exam.ExamType.QUESTION_BASED,
    duration_minutes: int = 45,
    passing_score: Any = 70,
    presentation_themes: Optional[List[Any]] = None,
    presentation_extra_info: str = "",
    ai_metadata: Optional[Dict[str, Any]] = None,
    created_by=None,
) -> Exam:
    return Exam.objects.create(
        title=title,
        description=description or "",
        instructions=instructions or "",
        exam_type=exam_type,
        questions=list(questions or []),
        presentation_themes=list(presentation_themes or []),
        presentation_extra_info=presentation_extra_info or "",
        duration_minutes=int(duration_minutes),
        passing_score=Decimal(str(passing_score)),
        ai_metadata=ai_metadata,
        created_by=created_by,
    )
