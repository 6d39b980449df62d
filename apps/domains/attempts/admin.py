from django.contrib import admin

from .models import AnswerLog, Attempt


@admin.register(Attempt)
class AttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "exam", "candidate_email", "status", "percentage", "passed", "expires_at", "created_at")
    list_filter = ("status", "is_presentation")
    search_fields = ("candidate_email", "candidate_name", "access_token")
    readonly_fields = ("access_token", "questions_snapshot")


@admin.register(AnswerLog)
class AnswerLogAdmin(admin.ModelAdmin):
    list_display = ("id", "attempt", "question_id", "time_spent", "created_at")
