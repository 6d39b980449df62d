from django.contrib import admin

from .models import Exam


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "exam_type", "duration_minutes", "passing_score", "is_active", "created_at")
    list_filter = ("exam_type", "is_active")
    search_fields = ("title",)
