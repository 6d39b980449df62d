from rest_framework import serializers

from apps.support.notifications.models import OutboxEvent


class EnqueueNotificationSerializer(serializers.Serializer):
    event_type = serializers.CharField(max_length=64)
    payload = serializers.JSONField(required=False, default=dict)
    target_url = serializers.URLField(required=False, allow_blank=True, max_length=1000)

    def validate_payload(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("payload must be an object")
        return value


class OutboxEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OutboxEvent
        fields = [
            "id",
            "event_type",
            "target_url",
            "status",
            "attempts",
            "max_attempts",
            "next_retry_at",
            "http_status",
            "error",
            "created_at",
            "finished_at",
        ]
        read_only_fields = fields
