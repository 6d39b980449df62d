from rest_framework import serializers


class AIJobCreateSerializer(serializers.Serializer):
    profession = serializers.CharField(max_length=255)
    skills = serializers.ListField(child=serializers.CharField(max_length=128), required=False, default=list)
    num_questions = serializers.IntegerField(required=False, min_value=1)
    persist = serializers.BooleanField(required=False, default=False)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    duration_minutes = serializers.IntegerField(required=False, min_value=1, default=45)
    passing_score = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=70)
