# PATH: apps/domains/attempts/models/answer_log.py
from django.db import models


class AnswerLog(models.Model):
    """
    답안 저장 감사 로그 (save 1회 = row 1개, 수정하지 않음)
    """

    attempt = models.ForeignKey(
        "attempts.Attempt",
        on_delete=models.CASCADE,
        related_name="answer_logs",
    )
    question_id = models.IntegerField()
    answer = models.JSONField(null=True, blank=True)
    time_spent = models.PositiveIntegerField(null=True, blank=True)
    marked_for_review = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "attempts_answer_log"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["attempt", "question_id"], name="answer_log_attempt_q_idx"),
        ]
