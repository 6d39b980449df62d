# apps/api/v1/urls.py
from django.urls import path, include

urlpatterns = [
    # =========================
    # AI 시험 생성 Job
    # =========================
    path("ai/", include("apps.domains.ai.urls")),

    # =========================
    # Notification outbox (운영용 수동 적재)
    # =========================
    path("notifications/", include("apps.support.notifications.urls")),

    # =========================
    # Attempts: public/tests/<token>/..., invites/, attempts/
    # =========================
    path("", include("apps.domains.attempts.urls")),
]
