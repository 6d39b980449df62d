# PATH: apps/shared/queue/models.py
from django.db import models

from apps.api.common.models import BaseModel


class QueueStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    RUNNING = "running", "Running"
    SUCCEEDED = "succeeded", "Succeeded"
    FAILED = "failed", "Failed"


class QueueItemModel(BaseModel):
    """
    DB 테이블 기반 work queue item (추상)

    - payload는 queue 입장에서 opaque
    - status=failed + next_retry_at 있음 → 재시도 대기
    - status=failed + next_retry_at 없음 → 최종 실패
    - 처리 이력은 감사용으로 삭제하지 않는다
    """

    Status = QueueStatus

    status = models.CharField(
        max_length=20,
        choices=QueueStatus.choices,
        default=QueueStatus.PENDING,
        db_index=True,
    )

    payload = models.JSONField(default=dict, blank=True)

    attempts = models.PositiveIntegerField(default=0)
    max_attempts = models.PositiveIntegerField(default=3)
    next_retry_at = models.DateTimeField(null=True, blank=True, db_index=True)

    result = models.JSONField(null=True, blank=True)
    error = models.TextField(blank=True, default="")

    # claim 소유권 (worker_id) + stale 판단 기준 시각
    locked_by = models.CharField(max_length=128, blank=True, default="")
    claimed_at = models.DateTimeField(null=True, blank=True)

    started_at = models.DateTimeField(null=True, blank=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def is_terminal(self) -> bool:
        if self.status == QueueStatus.SUCCEEDED:
            return True
        return self.status == QueueStatus.FAILED and self.next_retry_at is None
