"""Serializers for payments."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking
from apps.bookings.serializers import BookingItemSerializer
from apps.users.serializers import UserShortSerializer

from .models import Payment


class PaymentCreateSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Payment.Method.choices, required=False, allow_null=True)


class PaymentBookingSerializer(serializers.ModelSerializer):
    user = UserShortSerializer(read_only=True)

    class Meta:
        model = Booking
        fields = ["id", "user", "start_date", "end_date", "status", "total_amount"]


class PaymentSerializer(serializers.ModelSerializer):
    booking = PaymentBookingSerializer(read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking",
            "amount",
            "method",
            "status",
            "reference_no",
            "paid_at",
            "proof_url",
            "gateway_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PaymentHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "amount",
            "method",
            "status",
            "paid_at",
            "reference_no",
            "proof_url",
            "created_at",
            "updated_at",
        ]


class AdminBookingDetailSerializer(serializers.ModelSerializer):
    user = UserShortSerializer(read_only=True)
    items = BookingItemSerializer(many=True, read_only=True)

    class Meta:
        model = Booking
        fields = ["id", "user", "start_date", "end_date", "total_amount", "status", "notes", "items"]
