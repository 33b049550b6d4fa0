"""Serializers for the booking domain.

Input serializers only validate shapes; business rules (catalog lookups,
transitions, pricing) live in the command handlers.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.users.serializers import UserShortSerializer

from .models import Booking, BookingItem


class BookingItemInputSerializer(serializers.Serializer):
    service_id = serializers.UUIDField()
    package_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BookingCreateSerializer(serializers.Serializer):
    """Booking request from the owner."""

    start_date = serializers.DateField()
    end_date = serializers.DateField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = BookingItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):  # type: ignore
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError(
                {"end_date": "Start date must be on or before end date."}
            )
        return attrs


class BookingUpdateSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class AdminNotesSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class BookingItemSerializer(serializers.ModelSerializer):
    service_name = serializers.ReadOnlyField(source="service.name")
    package_name = serializers.ReadOnlyField(source="package.name", default=None)

    class Meta:
        model = BookingItem
        fields = [
            "id",
            "type",
            "service",
            "service_name",
            "package",
            "package_name",
            "quantity",
            "unit_price",
            "subtotal",
            "notes",
        ]
        read_only_fields = fields


class BookingSerializer(serializers.ModelSerializer):
    """Full booking with its items."""

    user = UserShortSerializer(read_only=True)
    approver = UserShortSerializer(read_only=True)
    items = BookingItemSerializer(many=True, read_only=True)
    duration_days = serializers.ReadOnlyField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "user",
            "start_date",
            "end_date",
            "duration_days",
            "total_amount",
            "status",
            "notes",
            "approver",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
