"""Admin registration for notifications."""

from __future__ import annotations

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "type", "channel", "sent_at", "read_at")
    list_filter = ("type", "channel")
    search_fields = ("title", "body", "user__email")
