"""Admin registration for payments."""

from __future__ import annotations

from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("reference_no", "booking", "amount", "method", "status", "gateway_status", "paid_at", "created_at")
    list_filter = ("status", "method")
    search_fields = ("reference_no", "booking__id", "booking__user__email")
    readonly_fields = (
        "reference_no",
        "booking",
        "amount",
        "status",
        "gateway_status",
        "paid_at",
        "proof_url",
        "snap_token",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False
