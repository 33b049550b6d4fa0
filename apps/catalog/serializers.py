"""Serializers for the read-only catalog API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Package, Service


class PackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Package
        fields = ["id", "name", "description", "unit_rate", "features"]


class ServiceSerializer(serializers.ModelSerializer):
    packages = PackageSerializer(many=True, read_only=True)

    class Meta:
        model = Service
        fields = ["id", "name", "description", "unit_rate", "is_active", "packages"]
