# PATH: apps/support/notifications/views.py
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.core.permissions import IsAdminOrStaff
from apps.support.notifications.models import OutboxEvent
from apps.support.notifications.serializers import (
    EnqueueNotificationSerializer,
    OutboxEventSerializer,
)
from apps.support.notifications.services.outbox import enqueue_notification


class NotificationEnqueueView(APIView):
    """
    POST /api/v1/notifications/
    staff 가 임의 이벤트를 outbox 에 적재 (운영 / 재발송 용)
    """
    permission_classes = [IsAuthenticated, IsAdminOrStaff]

    def post(self, request):
        serializer = EnqueueNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        event_id = enqueue_notification(
            event_type=data["event_type"],
            payload=data.get("payload") or {},
            target_url=data.get("target_url") or None,
        )
        if event_id is None:
            return Response(
                {"error": "webhook_not_configured", "message": "No webhook URL configured."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        event = OutboxEvent.objects.get(pk=event_id)
        return Response(OutboxEventSerializer(event).data, status=status.HTTP_201_CREATED)
