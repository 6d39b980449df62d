# PATH: apps/domains/attempts/services/deadline_sweeper.py
"""
Deadline Sweeper (주기 실행, 기본 60초)

1) pending / in_progress + expires_at 경과 → timeout
   completed_at = expires_at, score/max/percentage 미설정이면 0, passed=False
2) in_progress + 문항형 + last_heartbeat_at 이 idle 기준보다 오래됨 → escaped
   (heartbeat 가 한 번도 없었던 attempt 는 대상 아님)
3) 발표형 + 마감 1시간 이내 + 미통지 → deadline_warning 1회 적재
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import models, transaction
from django.db.models import F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.domains.attempts.models import Attempt
from apps.domains.attempts.services import events
from apps.domains.attempts.services.grading import max_possible_score
from apps.support.notifications.services.outbox import enqueue_notification

logger = logging.getLogger(__name__)

Status = Attempt.Status


def _zero():
    return Value(Decimal("0"), output_field=models.DecimalField(max_digits=7, decimal_places=2))


@dataclass(frozen=True)
class SweepReport:
    timed_out: int = 0
    escaped: int = 0
    warned: int = 0


def timeout_expired(*, now: datetime) -> int:
    return Attempt.objects.filter(
        status__in=Attempt.ACTIVE_STATUSES,
        expires_at__lte=now,
    ).update(
        status=Status.TIMEOUT,
        completed_at=F("expires_at"),
        score=Coalesce(F("score"), _zero()),
        max_score=Coalesce(F("max_score"), _zero()),
        percentage=Coalesce(F("percentage"), _zero()),
        passed=False,
        updated_at=now,
    )


def escape_idle(*, now: datetime, idle_seconds: int) -> int:
    cutoff = now - timedelta(seconds=int(idle_seconds))
    idle = Attempt.objects.filter(
        status=Status.IN_PROGRESS,
        is_presentation=False,
        last_heartbeat_at__isnull=False,
        last_heartbeat_at__lt=cutoff,
    )

    escaped = 0
    for attempt_id, snapshot in list(idle.values_list("id", "questions_snapshot")):
        # max_score 는 anti-cheat escape 와 같은 기준 (문항 만점 합계)
        escaped += idle.filter(pk=attempt_id).update(
            status=Status.ESCAPED,
            completed_at=now,
            score=Coalesce(F("score"), _zero()),
            max_score=max_possible_score(snapshot),
            percentage=Coalesce(F("percentage"), _zero()),
            passed=False,
            updated_at=now,
        )
    return escaped


def warn_deadlines(*, now: datetime, window_seconds: int) -> int:
    candidate_ids = list(
        Attempt.objects.filter(
            is_presentation=True,
            status__in=Attempt.ACTIVE_STATUSES,
            deadline_notified=False,
            expires_at__gt=now,
            expires_at__lte=now + timedelta(seconds=int(window_seconds)),
        ).values_list("id", flat=True)
    )

    warned = 0
    for attempt_id in candidate_ids:
        try:
            # 플래그 세팅 + outbox 적재를 한 트랜잭션으로 (적재 실패 시 플래그도 롤백 → 다음 sweep 재시도)
            with transaction.atomic():
                flagged = Attempt.objects.filter(
                    pk=attempt_id,
                    deadline_notified=False,
                    status__in=Attempt.ACTIVE_STATUSES,
                ).update(deadline_notified=True, updated_at=now)
                if not flagged:
                    continue

                attempt = Attempt.objects.select_related("exam").get(pk=attempt_id)
                enqueue_notification(
                    event_type=events.DEADLINE_WARNING,
                    payload=events.build_payload(events.DEADLINE_WARNING, attempt),
                )
                warned += 1
        except Exception:
            logger.exception("deadline warning failed attempt_id=%s", attempt_id)

    return warned


def sweep_deadlines(*, now: Optional[datetime] = None) -> SweepReport:
    now = now or timezone.now()

    timed_out = timeout_expired(now=now)
    escaped = escape_idle(
        now=now,
        idle_seconds=int(getattr(settings, "ATTEMPT_IDLE_THRESHOLD_SECONDS", 120)),
    )
    warned = warn_deadlines(
        now=now,
        window_seconds=int(getattr(settings, "ATTEMPT_DEADLINE_WARNING_SECONDS", 3600)),
    )

    report = SweepReport(timed_out=timed_out, escaped=escaped, warned=warned)
    if timed_out or escaped or warned:
        logger.info("deadline_sweep timed_out=%s escaped=%s warned=%s", timed_out, escaped, warned)
    return report
