# PATH: apps/domains/attempts/views/admin_views.py
from __future__ import annotations

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsAdminOrStaff
from apps.domains.attempts.filters import AttemptFilter
from apps.domains.attempts.serializers.admin import (
    AttemptDetailSerializer,
    AttemptListSerializer,
    GradeAnswerSerializer,
    GradePresentationSerializer,
    InviteCreateSerializer,
)
from apps.domains.attempts.services.attempt_service import AttemptService

logger = logging.getLogger(__name__)


class AttemptPagination(PageNumberPagination):
    # ?limit= (기본 20, 최대 100)
    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100


class InviteCreateView(APIView):
    """
    POST /api/v1/invites/
    → {attempt_id, access_token, test_url, expires_at, status}
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request):
        serializer = InviteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attempt = AttemptService.create_invite(
            exam_id=data["test_id"],
            candidate=data["candidate"],
            expires_in_hours=data.get("expires_in_hours"),
            metadata=data.get("metadata") or {},
        )
        return Response(AttemptService.invite_response(attempt), status=status.HTTP_201_CREATED)


class AttemptViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    staff 전용 Attempt 조회 / 초대 취소 / 수동 채점
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]
    pagination_class = AttemptPagination
    lookup_value_regex = r"\d+"

    filter_backends = (DjangoFilterBackend, OrderingFilter)
    filterset_class = AttemptFilter
    ordering_fields = ["created_at", "completed_at", "percentage"]

    def get_queryset(self):
        return AttemptService.queryset()

    def get_serializer_class(self):
        if self.action == "list":
            return AttemptListSerializer
        return AttemptDetailSerializer

    def get_object(self):
        return AttemptService.get(int(self.kwargs["pk"]))

    def destroy(self, request, *args, **kwargs):
        AttemptService.delete(int(kwargs["pk"]))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="grade-answer")
    def grade_answer(self, request, pk=None):
        serializer = GradeAnswerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attempt = AttemptService.grade_answer(
            int(pk),
            question_id=data["question_id"],
            is_correct=data["is_correct"],
            points=data.get("points"),
            grader=request.user,
        )
        return Response(AttemptDetailSerializer(attempt).data)

    @action(detail=True, methods=["post"], url_path="grade-presentation")
    def grade_presentation(self, request, pk=None):
        serializer = GradePresentationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        attempt = AttemptService.grade_presentation(
            int(pk),
            grade_value=data["grade"],
            comment=data.get("comment") or "",
            grader=request.user,
        )
        return Response(AttemptDetailSerializer(attempt).data)

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        exam_id = request.query_params.get("test_id")
        counts = AttemptService.status_distribution(
            exam_id=int(exam_id) if exam_id and exam_id.isdigit() else None,
        )
        return Response({"total": sum(counts.values()), "by_status": counts})
