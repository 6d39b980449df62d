from django.conf import settings
from django.db import models

from apps.api.common.models import BaseModel


class Exam(BaseModel):
    """
    시험(Test) 정의

    - questions: 문항 JSON 목록 (apps.shared.contracts.questions 계약)
    - presentation 유형은 문항 대신 themes / extra_info 를 가진다
    - Attempt는 초대 시점에 이 내용을 snapshot 하므로
      여기서 수정해도 진행 중인 Attempt에는 반영되지 않는다
    """

    class ExamType(models.TextChoices):
        QUESTION_BASED = "question_based", "Question based"
        PRESENTATION = "presentation", "Presentation"

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    instructions = models.TextField(blank=True)

    exam_type = models.CharField(
        max_length=30,
        choices=ExamType.choices,
        default=ExamType.QUESTION_BASED,
    )

    questions = models.JSONField(default=list, blank=True)

    presentation_themes = models.JSONField(default=list, blank=True)
    presentation_extra_info = models.TextField(blank=True)

    duration_minutes = models.PositiveIntegerField(default=45)
    passing_score = models.DecimalField(max_digits=5, decimal_places=2, default=70)

    is_active = models.BooleanField(default=True)

    # AI 생성 시험의 pipeline 로그 등
    ai_metadata = models.JSONField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_exams",
    )

    class Meta:
        db_table = "exams_exam"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def is_presentation(self) -> bool:
        return self.exam_type == self.ExamType.PRESENTATION

    def snapshot(self):
        """
        Attempt 초대 시점 snapshot.
        presentation → 주제/추가정보 dict, 그 외 → 문항 목록 사본
        """
        if self.is_presentation:
            return {
                "test_type": self.ExamType.PRESENTATION.value,
                "themes": list(self.presentation_themes or []),
                "extra_info": self.presentation_extra_info or "",
            }
        return list(self.questions or [])
