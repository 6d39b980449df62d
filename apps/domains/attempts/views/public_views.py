# PATH: apps/domains/attempts/views/public_views.py
"""
응시자용 API (access_token 이 유일한 bearer credential)

- 인증 없음 (AllowAny), 모든 경로는 /public/tests/<token>/...
- 실패 응답은 항상 {"error": code, "message": text}
"""
from __future__ import annotations

from django.utils import timezone
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.common.exceptions import ValidationFailed
from apps.domains.attempts.errors import TestExpired
from apps.domains.attempts.models import Attempt
from apps.domains.attempts.serializers.public import (
    PresentationSubmitSerializer,
    PublicAttemptSerializer,
    SaveAnswerSerializer,
    SubmitResultSerializer,
    SubmitSerializer,
    ViolationSerializer,
)
from apps.domains.attempts.services.attempt_service import AttemptService


def _validated(serializer_cls, data) -> dict:
    serializer = serializer_cls(data=data)
    if not serializer.is_valid():
        field, errors = next(iter(serializer.errors.items()))
        detail = errors[0] if isinstance(errors, list) and errors else errors
        raise ValidationFailed(f"{field}: {detail}", code="invalid_request")
    return serializer.validated_data


class PublicAttemptAPIView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []


class PublicAttemptView(PublicAttemptAPIView):
    def get(self, request, token: str):
        attempt = AttemptService.get_by_token(token)
        if attempt.status in Attempt.ACTIVE_STATUSES and attempt.expires_at <= timezone.now():
            raise TestExpired()
        return Response(PublicAttemptSerializer(attempt).data)


class StartAttemptView(PublicAttemptAPIView):
    def post(self, request, token: str):
        attempt = AttemptService.start(token)
        return Response(PublicAttemptSerializer(attempt).data)


class SaveAnswerView(PublicAttemptAPIView):
    def post(self, request, token: str):
        data = _validated(SaveAnswerSerializer, request.data)
        out = AttemptService.save_answer(
            token,
            question_id=data["question_id"],
            answer=data.get("answer"),
            time_spent=data.get("time_spent"),
            marked_for_review=data.get("marked_for_review", False),
        )
        return Response(out)


class SubmitAttemptView(PublicAttemptAPIView):
    def post(self, request, token: str):
        data = _validated(SubmitSerializer, request.data)
        attempt = AttemptService.submit(token, answers=data.get("answers"))
        return Response(SubmitResultSerializer(attempt).data)


class SubmitPresentationView(PublicAttemptAPIView):
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request, token: str):
        data = _validated(PresentationSubmitSerializer, request.data)
        attempt = AttemptService.submit_presentation(
            token,
            link=data.get("presentation_link"),
            upload=data.get("file"),
        )
        return Response(SubmitResultSerializer(attempt).data)


class HeartbeatView(PublicAttemptAPIView):
    def post(self, request, token: str):
        return Response(AttemptService.heartbeat(token))


class ReportViolationView(PublicAttemptAPIView):
    def post(self, request, token: str):
        data = _validated(ViolationSerializer, request.data)
        out = AttemptService.report_violation(
            token,
            violation_type=data.get("type") or "tab_switch",
            tab_switches=data.get("tab_switches"),
        )
        return Response(out)


class AttemptStatusView(PublicAttemptAPIView):
    def get(self, request, token: str):
        return Response(AttemptService.get_status(token))
