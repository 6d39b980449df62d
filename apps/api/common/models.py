# PATH: apps/api/common/models.py
from django.db import models


class TimestampModel(models.Model):
    """
    created_at / updated_at 자동 기록 추상 모델

    주의: QuerySet.update()는 auto_now를 건드리지 않는다.
    조건부 update를 쓰는 서비스는 updated_at을 직접 넘겨야 한다.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BaseModel(TimestampModel):
    """
    Attempt / Exam / Queue item 등 모든 도메인 모델의 공통 베이스.
    """
    class Meta:
        abstract = True
