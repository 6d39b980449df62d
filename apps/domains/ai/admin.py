from django.contrib import admin

from .models import AIJobModel


@admin.register(AIJobModel)
class AIJobAdmin(admin.ModelAdmin):
    list_display = ("id", "status", "persist", "exam", "attempts", "created_at", "finished_at")
    list_filter = ("status", "persist")
    readonly_fields = ("payload", "result", "error")
