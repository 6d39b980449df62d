# PATH: apps/shared/queue/db_queue.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Type

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from apps.shared.queue.models import QueueItemModel, QueueStatus

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 5000


@dataclass(frozen=True)
class DBQueueConfig:
    stale_claim_sec: int = 600       # claim 후 이 시간 동안 finalize 없으면 stale
    default_max_attempts: int = 3
    base_backoff_sec: int = 30
    max_backoff_sec: int = 3600
    retry_enabled: bool = True


@dataclass(frozen=True)
class FailOutcome:
    ok: bool
    reason: str                       # "retry_scheduled" | "failed" | "not_found" | "lease_owner_mismatch"
    next_retry_at: Optional[datetime] = None


class DBWorkQueue:
    """
    테이블 기반 at-least-once work queue.

    - DB가 SSOT, worker는 stateless
    - claim: SELECT ... FOR UPDATE SKIP LOCKED + 조건부 UPDATE
      → N개 worker가 같은 테이블을 폴링해도 한 item은 한 worker만 처리
    - 실패 시 capped exponential backoff로 재시도 예약
    - 크래시로 running에 남은 item은 stale_claim_sec 이후 회수
    """

    def __init__(self, model: Type[QueueItemModel], cfg: Optional[DBQueueConfig] = None):
        self.model = model
        self.cfg = cfg or DBQueueConfig()

    # ------------------------------------------------------------------
    # producer
    # ------------------------------------------------------------------

    def enqueue(
        self,
        *,
        payload: Optional[Dict[str, Any]] = None,
        max_attempts: Optional[int] = None,
        **fields: Any,
    ) -> int:
        item = self.model.objects.create(
            payload=payload or {},
            status=QueueStatus.PENDING,
            max_attempts=int(max_attempts or self.cfg.default_max_attempts),
            **fields,
        )
        logger.debug("queue_enqueue table=%s id=%s", self.model._meta.db_table, item.pk)
        return int(item.pk)

    # ------------------------------------------------------------------
    # consumer
    # ------------------------------------------------------------------

    def backoff_seconds(self, attempts: int) -> int:
        return int(min(self.cfg.max_backoff_sec, self.cfg.base_backoff_sec * (2 ** max(0, attempts - 1))))

    def _eligible(self, now: datetime) -> Q:
        fresh = Q(status=QueueStatus.PENDING) & (Q(next_retry_at__isnull=True) | Q(next_retry_at__lte=now))
        retry_due = Q(status=QueueStatus.FAILED, next_retry_at__isnull=False, next_retry_at__lte=now)
        return fresh | retry_due

    @transaction.atomic
    def claim_one(self, *, worker_id: str) -> Optional[QueueItemModel]:
        now = timezone.now()

        # 0) 크래시한 worker가 남긴 stale running 회수
        self.reclaim_stale(now=now)

        # 1) 후보 1건 잠금 (다른 worker가 잠근 row는 건너뜀)
        item = (
            self.model.objects.select_for_update(skip_locked=True)
            .filter(self._eligible(now))
            .order_by("created_at", "id")
            .first()
        )
        if item is None:
            return None

        # 2) 상태 전이는 현재 값 조건부 UPDATE (row lock 미지원 백엔드에서도 중복 claim 방지)
        updated = self.model.objects.filter(
            pk=item.pk,
            status=item.status,
            attempts=item.attempts,
        ).update(
            status=QueueStatus.RUNNING,
            attempts=F("attempts") + 1,
            locked_by=str(worker_id),
            claimed_at=now,
            started_at=now,
            next_retry_at=None,
            updated_at=now,
        )
        if not updated:
            return None

        item.refresh_from_db()
        logger.info(
            "queue_claimed table=%s id=%s worker=%s attempt=%s/%s",
            self.model._meta.db_table,
            item.pk,
            worker_id,
            item.attempts,
            item.max_attempts,
        )
        return item

    def complete(
        self,
        item_id: int,
        *,
        worker_id: Optional[str] = None,
        result: Any = None,
        **extra: Any,
    ) -> bool:
        now = timezone.now()
        qs = self.model.objects.filter(pk=item_id, status=QueueStatus.RUNNING)
        if worker_id is not None:
            qs = qs.filter(locked_by=str(worker_id))

        updated = qs.update(
            status=QueueStatus.SUCCEEDED,
            result=result,
            error="",
            locked_by="",
            claimed_at=None,
            finished_at=now,
            updated_at=now,
            **extra,
        )
        if not updated:
            logger.warning("queue_complete_ignored table=%s id=%s worker=%s", self.model._meta.db_table, item_id, worker_id)
        return bool(updated)

    @transaction.atomic
    def fail(
        self,
        item_id: int,
        *,
        error: str,
        worker_id: Optional[str] = None,
        retryable: bool = True,
        **extra: Any,
    ) -> FailOutcome:
        """
        실패 처리 + retry 스케줄링
        - retryable & attempts < max_attempts → failed + next_retry_at = now + backoff
        - 아니면 failed 확정 (next_retry_at 없음)
        """
        now = timezone.now()
        item = self.model.objects.select_for_update().filter(pk=item_id).first()
        if item is None:
            return FailOutcome(ok=False, reason="not_found")

        if item.status != QueueStatus.RUNNING or (worker_id is not None and item.locked_by != str(worker_id)):
            return FailOutcome(ok=False, reason="lease_owner_mismatch")

        attempts = int(item.attempts or 0)
        next_retry_at = None
        if retryable and self.cfg.retry_enabled and attempts < int(item.max_attempts):
            next_retry_at = now + timedelta(seconds=self.backoff_seconds(attempts))

        self.model.objects.filter(pk=item_id).update(
            status=QueueStatus.FAILED,
            error=str(error or "")[:MAX_ERROR_LENGTH],
            next_retry_at=next_retry_at,
            locked_by="",
            claimed_at=None,
            finished_at=now,
            updated_at=now,
            **extra,
        )

        reason = "retry_scheduled" if next_retry_at else "failed"
        logger.info(
            "queue_failed table=%s id=%s attempt=%s/%s outcome=%s",
            self.model._meta.db_table,
            item_id,
            attempts,
            item.max_attempts,
            reason,
        )
        return FailOutcome(ok=True, reason=reason, next_retry_at=next_retry_at)

    def reclaim_stale(self, *, now: Optional[datetime] = None) -> int:
        now = now or timezone.now()
        cutoff = now - timedelta(seconds=int(self.cfg.stale_claim_sec))
        stale = self.model.objects.filter(status=QueueStatus.RUNNING, claimed_at__lt=cutoff)

        requeued = stale.filter(attempts__lt=F("max_attempts")).update(
            status=QueueStatus.PENDING,
            locked_by="",
            claimed_at=None,
            next_retry_at=None,
            updated_at=now,
        )
        expired = stale.filter(attempts__gte=F("max_attempts")).update(
            status=QueueStatus.FAILED,
            error="claim_expired",
            locked_by="",
            claimed_at=None,
            next_retry_at=None,
            finished_at=now,
            updated_at=now,
        )

        if requeued or expired:
            logger.warning(
                "queue_stale_reclaimed table=%s requeued=%s expired=%s",
                self.model._meta.db_table,
                requeued,
                expired,
            )
        return int(requeued + expired)
