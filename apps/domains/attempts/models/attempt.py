# PATH: apps/domains/attempts/models/attempt.py
from django.conf import settings
from django.db import models
from django.db.models import Q

from apps.api.common.models import BaseModel


class Attempt(BaseModel):
    """
    응시자 1명의 시험 1회 응시 (access_token 으로 식별)

    상태 전이:
    pending → in_progress → {completed | needs_review | timeout | escaped}
    needs_review → completed (수동 채점 완료 시)

    - access_token / questions_snapshot 은 생성 후 불변
    - started_at 은 최초 start 에서만 기록
    - score / percentage 는 채점 종료 상태에서만 기록
    - 물리 삭제는 pending 상태에서만 허용 (초대 취소)
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"
        NEEDS_REVIEW = "needs_review", "Needs review"
        TIMEOUT = "timeout", "Timeout"
        ESCAPED = "escaped", "Escaped"

    ACTIVE_STATUSES = (Status.PENDING, Status.IN_PROGRESS)
    GRADED_STATUSES = (Status.COMPLETED, Status.NEEDS_REVIEW)

    exam = models.ForeignKey(
        "exams.Exam",
        on_delete=models.PROTECT,
        related_name="attempts",
    )

    # -------------------------
    # candidate identity
    # -------------------------
    candidate_name = models.CharField(max_length=255)
    candidate_email = models.EmailField(db_index=True)
    candidate_external_id = models.CharField(max_length=128, blank=True, default="")
    candidate_phone = models.CharField(max_length=32, blank=True, default="")
    candidate_chat_id = models.BigIntegerField(null=True, blank=True)

    access_token = models.CharField(max_length=64, unique=True, editable=False)
    expires_at = models.DateTimeField(db_index=True)

    # -------------------------
    # questions / answers
    # -------------------------
    is_presentation = models.BooleanField(default=False)
    questions_snapshot = models.JSONField(default=list, blank=True, editable=False)
    answers = models.JSONField(default=list, blank=True)
    graded_answers = models.JSONField(default=list, blank=True)

    score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    max_score = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    percentage = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    passed = models.BooleanField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    last_heartbeat_at = models.DateTimeField(null=True, blank=True)
    time_spent_seconds = models.PositiveIntegerField(null=True, blank=True)

    # -------------------------
    # anti-cheat
    # -------------------------
    violation_count = models.PositiveIntegerField(default=0)
    suspicious_activity = models.JSONField(default=list, blank=True)

    # -------------------------
    # presentation
    # -------------------------
    presentation_link = models.URLField(max_length=1000, blank=True, default="")
    presentation_file = models.CharField(max_length=500, blank=True, default="")
    presentation_grade = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    presentation_comment = models.TextField(blank=True, default="")
    graded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="graded_attempts",
    )
    graded_at = models.DateTimeField(null=True, blank=True)

    metadata = models.JSONField(default=dict, blank=True)
    deadline_notified = models.BooleanField(default=False)

    class Meta:
        db_table = "attempts_attempt"
        ordering = ["-created_at"]
        constraints = [
            # 응시자당 미응시 초대는 1건만
            models.UniqueConstraint(
                fields=["candidate_email"],
                condition=Q(status="pending"),
                name="uniq_pending_attempt_per_candidate",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="attempt_status_expires_idx"),
            models.Index(fields=["status", "created_at"], name="attempt_status_created_idx"),
        ]

    def __str__(self):
        return f"Attempt#{self.pk} {self.candidate_email} ({self.status})"

    @property
    def total_questions(self) -> int:
        if isinstance(self.questions_snapshot, list):
            return len(self.questions_snapshot)
        return 0

    @property
    def answered_count(self) -> int:
        return len(self.answers or [])
