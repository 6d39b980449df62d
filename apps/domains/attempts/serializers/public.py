# PATH: apps/domains/attempts/serializers/public.py
"""
응시자(token) 화면용 serializer

정답 / 해설 / 기대 키워드는 절대 내려보내지 않는다.
"""
from __future__ import annotations

from rest_framework import serializers

from apps.domains.attempts.models import Attempt
from apps.shared.contracts.questions import public_questions


class PublicAttemptSerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(source="id", read_only=True)
    test = serializers.SerializerMethodField()
    questions = serializers.SerializerMethodField()
    presentation = serializers.SerializerMethodField()
    result = serializers.SerializerMethodField()

    class Meta:
        model = Attempt
        fields = [
            "attempt_id",
            "status",
            "candidate_name",
            "started_at",
            "expires_at",
            "completed_at",
            "test",
            "questions",
            "presentation",
            "answers",
            "violation_count",
            "result",
        ]
        read_only_fields = fields

    def get_test(self, obj: Attempt):
        exam = obj.exam
        return {
            "title": exam.title,
            "description": exam.description,
            "instructions": exam.instructions,
            "duration_minutes": exam.duration_minutes,
            "test_type": "presentation" if obj.is_presentation else "question_based",
        }

    def get_questions(self, obj: Attempt):
        if obj.is_presentation:
            return []
        return public_questions(obj.questions_snapshot)

    def get_presentation(self, obj: Attempt):
        if not obj.is_presentation:
            return None
        snap = obj.questions_snapshot if isinstance(obj.questions_snapshot, dict) else {}
        return {
            "themes": snap.get("themes") or [],
            "extra_info": snap.get("extra_info") or "",
            "link": obj.presentation_link or None,
            "file_submitted": bool(obj.presentation_file),
        }

    def get_result(self, obj: Attempt):
        if obj.status != Attempt.Status.COMPLETED:
            return None
        return {
            "score": obj.score,
            "max_score": obj.max_score,
            "percentage": obj.percentage,
            "passed": obj.passed,
        }


class SubmitResultSerializer(serializers.ModelSerializer):
    attempt_id = serializers.IntegerField(source="id", read_only=True)

    class Meta:
        model = Attempt
        fields = [
            "attempt_id",
            "status",
            "score",
            "max_score",
            "percentage",
            "passed",
            "completed_at",
            "time_spent_seconds",
        ]
        read_only_fields = fields


class SaveAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    answer = serializers.JSONField(allow_null=True)
    time_spent = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    marked_for_review = serializers.BooleanField(required=False, default=False)


class SubmitSerializer(serializers.Serializer):
    # [{question_id, answer}] 또는 {question_id: answer}
    answers = serializers.JSONField(required=False)

    def validate_answers(self, value):
        if value is not None and not isinstance(value, (list, dict)):
            raise serializers.ValidationError("answers must be a list or an object")
        return value


class PresentationSubmitSerializer(serializers.Serializer):
    # URL 형식 검증은 서비스에서 (invalid_url / invalid_url_scheme 코드 구분)
    presentation_link = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    file = serializers.FileField(required=False, allow_empty_file=False)


class ViolationSerializer(serializers.Serializer):
    type = serializers.CharField(required=False, default="tab_switch", max_length=64)
    tab_switches = serializers.IntegerField(required=False, allow_null=True, min_value=0)
