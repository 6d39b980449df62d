# PATH: apps/domains/attempts/serializers/admin.py
from __future__ import annotations

from rest_framework import serializers

from apps.domains.attempts.models import Attempt


class CandidateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    external_id = serializers.CharField(required=False, allow_blank=True, max_length=128)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    chat_id = serializers.IntegerField(required=False, allow_null=True)


class InviteCreateSerializer(serializers.Serializer):
    test_id = serializers.IntegerField(min_value=1)
    candidate = CandidateSerializer()
    expires_in_hours = serializers.IntegerField(required=False, min_value=1, max_value=24 * 30)
    metadata = serializers.DictField(required=False, default=dict)


class AttemptListSerializer(serializers.ModelSerializer):
    test_id = serializers.IntegerField(source="exam_id", read_only=True)
    test_title = serializers.CharField(source="exam.title", read_only=True)

    class Meta:
        model = Attempt
        fields = [
            "id",
            "test_id",
            "test_title",
            "candidate_name",
            "candidate_email",
            "status",
            "score",
            "max_score",
            "percentage",
            "passed",
            "violation_count",
            "expires_at",
            "started_at",
            "completed_at",
            "created_at",
        ]
        read_only_fields = fields


class AttemptDetailSerializer(serializers.ModelSerializer):
    test_id = serializers.IntegerField(source="exam_id", read_only=True)
    test_title = serializers.CharField(source="exam.title", read_only=True)
    passing_score = serializers.DecimalField(source="exam.passing_score", max_digits=5, decimal_places=2, read_only=True)

    class Meta:
        model = Attempt
        exclude = ["exam"]


class GradeAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    is_correct = serializers.BooleanField()
    points = serializers.DecimalField(max_digits=7, decimal_places=2, required=False, allow_null=True, min_value=0)


class GradePresentationSerializer(serializers.Serializer):
    grade = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100)
    comment = serializers.CharField(required=False, allow_blank=True, default="")
