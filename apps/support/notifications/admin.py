from django.contrib import admin

from .models import OutboxEvent


@admin.register(OutboxEvent)
class OutboxEventAdmin(admin.ModelAdmin):
    list_display = ("id", "event_type", "status", "attempts", "max_attempts", "http_status", "next_retry_at", "created_at")
    list_filter = ("status", "event_type")
    readonly_fields = ("payload", "result", "locked_by", "claimed_at")
