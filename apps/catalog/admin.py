"""Admin registration for the catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import Package, Service


class PackageInline(admin.TabularInline):
    model = Package
    extra = 0


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("name", "unit_rate", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)
    inlines = [PackageInline]
