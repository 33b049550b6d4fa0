"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Public profile of a user."""

    class Meta:
        model = User
        fields = ["id", "email", "name", "phone", "role", "created_at"]
        read_only_fields = ["id", "role", "created_at"]


class UserShortSerializer(serializers.ModelSerializer):
    """Compact user representation embedded in bookings and payments."""

    class Meta:
        model = User
        fields = ["id", "email", "name"]


class RegisterSerializer(serializers.ModelSerializer):
    """Self-service sign-up; new accounts always get the USER role."""

    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True)
    phone = serializers.CharField(validators=[PHONE_VALIDATOR], required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ["email", "name", "phone", "password", "password_confirm"]
        extra_kwargs = {"name": {"required": True}}

    def validate(self, attrs):  # type: ignore
        if attrs["password"] != attrs["password_confirm"]:
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        return attrs

    def create(self, validated_data):  # type: ignore
        validated_data.pop("password_confirm")
        password = validated_data.pop("password")
        if not validated_data.get("phone"):
            validated_data.pop("phone", None)
        return User.objects.create_user(password=password, **validated_data)
