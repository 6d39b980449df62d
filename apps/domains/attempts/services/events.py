# PATH: apps/domains/attempts/services/events.py
"""
Attempt 상태 전이 → 외부 알림 이벤트

원칙:
- 상태 전이 트랜잭션이 커밋된 뒤에만 outbox 적재 (transaction.on_commit)
- 적재 실패는 로그만 남기고 삼킨다. 상태 전이를 되돌리지 않는다.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction

from apps.domains.attempts.models import Attempt
from apps.support.notifications.services.outbox import enqueue_notification

logger = logging.getLogger(__name__)

TEST_ASSIGNED = "test_assigned"
TEST_COMPLETED = "test_completed"
PRESENTATION_SUBMITTED = "presentation_submitted"
ATTEMPT_TERMINATED = "attempt_terminated"
ATTEMPT_GRADED = "attempt_graded"
DEADLINE_WARNING = "deadline_warning"


def build_test_url(access_token: str) -> str:
    base = str(getattr(settings, "WEBAPP_URL", "") or "").rstrip("/")
    return f"{base}/test/{access_token}"


def _num(v) -> Optional[float]:
    return None if v is None else float(v)


def _iso(dt) -> Optional[str]:
    return dt.isoformat() if dt else None


def _candidate(attempt: Attempt) -> Dict[str, Any]:
    return {
        "name": attempt.candidate_name,
        "email": attempt.candidate_email,
        "external_id": attempt.candidate_external_id or None,
        "telegram_id": attempt.candidate_chat_id,
    }


def build_payload(event_type: str, attempt: Attempt) -> Dict[str, Any]:
    exam = attempt.exam
    payload: Dict[str, Any] = {
        "attempt_id": attempt.pk,
        "status": attempt.status,
        "candidate": _candidate(attempt),
        "test": {"id": exam.pk, "title": exam.title},
    }

    if event_type == TEST_ASSIGNED:
        payload.update(
            access_token=attempt.access_token,
            test_url=build_test_url(attempt.access_token),
            expires_at=_iso(attempt.expires_at),
        )
    elif event_type in (TEST_COMPLETED, ATTEMPT_GRADED, ATTEMPT_TERMINATED):
        payload.update(
            score=_num(attempt.score),
            max_score=_num(attempt.max_score),
            percentage=_num(attempt.percentage),
            passed=attempt.passed,
            completed_at=_iso(attempt.completed_at),
        )
        if event_type == ATTEMPT_TERMINATED:
            payload["violation_count"] = attempt.violation_count
    elif event_type == PRESENTATION_SUBMITTED:
        payload.update(
            presentation_link=attempt.presentation_link or None,
            presentation_file=attempt.presentation_file or None,
        )
    elif event_type == DEADLINE_WARNING:
        payload["expires_at"] = _iso(attempt.expires_at)

    return payload


def _safe_enqueue(event_type: str, payload: Dict[str, Any]) -> None:
    try:
        enqueue_notification(event_type=event_type, payload=payload)
    except Exception:
        logger.exception("notification enqueue failed event_type=%s attempt_id=%s", event_type, payload.get("attempt_id"))


def emit_after_commit(event_type: str, attempt: Attempt) -> None:
    """
    payload 는 호출 시점 attempt 값으로 고정, 적재는 커밋 후.
    """
    try:
        payload = build_payload(event_type, attempt)
    except Exception:
        logger.exception("notification payload build failed event_type=%s attempt_id=%s", event_type, attempt.pk)
        return

    transaction.on_commit(lambda: _safe_enqueue(event_type, payload))
