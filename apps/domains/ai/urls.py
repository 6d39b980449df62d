# PATH: apps/domains/ai/urls.py
from django.urls import path

from apps.domains.ai.views.job_views import AIJobCreateView, AIJobStatusView

urlpatterns = [
    path("jobs/", AIJobCreateView.as_view(), name="ai-job-create"),
    path("jobs/<int:job_id>/", AIJobStatusView.as_view(), name="ai-job-status"),
]
