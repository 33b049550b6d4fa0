"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingItem


class BookingItemInline(admin.TabularInline):
    model = BookingItem
    extra = 0
    readonly_fields = ("service", "package", "quantity", "unit_price", "subtotal")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "user",
        "status",
        "start_date",
        "end_date",
        "total_amount",
        "approver",
        "created_at",
    )
    list_filter = ("status", "start_date")
    search_fields = ("id", "user__email", "user__name")
    readonly_fields = ("total_amount", "status", "approver", "created_at", "updated_at")
    inlines = [BookingItemInline]

    def has_delete_permission(self, request, obj=None):
        return False
