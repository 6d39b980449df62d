# apps/domains/ai/models.py
from django.conf import settings
from django.db import models

from apps.shared.queue.models import QueueItemModel


class AIJobModel(QueueItemModel):
    """
    AI 시험 생성 Job (DB queue item)

    - payload: profession / skills / num_questions ...
    - result: 생성·검증된 문항 + pipeline logs
    - 자동 재시도 없음 (max_attempts=1), 실패 시 호출자가 다시 적재
    - persist=True 면 성공 시 Exam 생성 후 exam 으로 연결
    """

    persist = models.BooleanField(default=False)

    title = models.CharField(max_length=255, blank=True, default="")
    description = models.TextField(blank=True, default="")
    duration_minutes = models.PositiveIntegerField(default=45)
    passing_score = models.DecimalField(max_digits=5, decimal_places=2, default=70)

    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ai_jobs",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ai_jobs",
    )

    class Meta:
        db_table = "ai_job"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="ai_job_status_created_idx"),
        ]

    def __str__(self):
        return f"AIJob#{self.pk} ({self.status})"
