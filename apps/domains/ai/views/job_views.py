# PATH: apps/domains/ai/views/job_views.py
from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsAdminOrStaff
from apps.domains.ai.gateway import enqueue_ai_job, get_job
from apps.domains.ai.serializers import AIJobCreateSerializer
from apps.domains.ai.services.job_status_response import build_job_status_response


class AIJobCreateView(APIView):
    """
    POST /api/v1/ai/jobs/
    생성은 비동기: 202 + job 상태 반환, 결과는 GET 으로 polling
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request):
        serializer = AIJobCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        job_id = enqueue_ai_job(
            profession=data["profession"],
            skills=data.get("skills") or [],
            num_questions=data.get("num_questions"),
            persist=data.get("persist", False),
            title=data.get("title") or "",
            description=data.get("description") or "",
            duration_minutes=data.get("duration_minutes", 45),
            passing_score=data.get("passing_score", 70),
            created_by=request.user,
        )
        return Response(build_job_status_response(get_job(job_id)), status=status.HTTP_202_ACCEPTED)


class AIJobStatusView(APIView):
    """
    GET /api/v1/ai/jobs/<job_id>/
    응답: { "job_id", "status", "result"?, "error"?, "test_id"? }
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def get(self, request, job_id: int):
        return Response(build_job_status_response(get_job(job_id)))
