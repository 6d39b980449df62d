# PATH: apps/domains/attempts/urls.py
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.domains.attempts.views.admin_views import AttemptViewSet, InviteCreateView
from apps.domains.attempts.views.public_views import (
    AttemptStatusView,
    HeartbeatView,
    PublicAttemptView,
    ReportViolationView,
    SaveAnswerView,
    StartAttemptView,
    SubmitAttemptView,
    SubmitPresentationView,
)

router = DefaultRouter()
router.register(r"attempts", AttemptViewSet, basename="attempts")

# ======================================================
# Candidate (token)
# ======================================================
public_urlpatterns = [
    path("", PublicAttemptView.as_view(), name="public-attempt"),
    path("start/", StartAttemptView.as_view(), name="public-attempt-start"),
    path("answers/", SaveAnswerView.as_view(), name="public-attempt-answers"),
    path("submit/", SubmitAttemptView.as_view(), name="public-attempt-submit"),
    path("presentation/", SubmitPresentationView.as_view(), name="public-attempt-presentation"),
    path("heartbeat/", HeartbeatView.as_view(), name="public-attempt-heartbeat"),
    path("violation/", ReportViolationView.as_view(), name="public-attempt-violation"),
    path("status/", AttemptStatusView.as_view(), name="public-attempt-status"),
]

# ======================================================
# Staff
# ======================================================
urlpatterns = [
    path("public/tests/<str:token>/", include(public_urlpatterns)),
    path("invites/", InviteCreateView.as_view(), name="invite-create"),
    path("", include(router.urls)),
]
