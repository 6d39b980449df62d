# PATH: apps/support/notifications/models.py
from django.db import models

from apps.shared.queue.models import QueueItemModel


class OutboxEvent(QueueItemModel):
    """
    외부 시스템으로 보낼 이벤트 (Notification Outbox)

    - 상태 전이 커밋 후 적재, delivery worker 가 서명된 HTTP POST 로 전달
    - 실패 시 capped exponential backoff 로 재시도, 이력은 삭제하지 않음
    """

    event_type = models.CharField(max_length=64, db_index=True)
    target_url = models.URLField(max_length=1000)

    # 마지막 전달 시도 결과
    http_status = models.PositiveIntegerField(null=True, blank=True)
    response_body = models.TextField(blank=True, default="")

    class Meta:
        db_table = "notifications_outbox_event"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "next_retry_at"], name="outbox_status_retry_idx"),
        ]

    def __str__(self):
        return f"OutboxEvent#{self.pk} {self.event_type} ({self.status})"
