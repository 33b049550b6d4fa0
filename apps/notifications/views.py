"""API views for notifications."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import ValidationError

from .models import Notification
from .serializers import NotificationSerializer


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """In-app notifications of the authenticated user.

    ``?read=true`` lists read notifications, ``?read=false`` unread ones.
    """

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):  # type: ignore
        qs = Notification.objects.filter(user=self.request.user).order_by("-sent_at")
        read = self.request.query_params.get("read")
        if read == "true":
            qs = qs.filter(read_at__isnull=False)
        elif read == "false":
            qs = qs.filter(read_at__isnull=True)
        return qs

    @action(detail=True, methods=["post"], url_path="read")
    def mark_read(self, request, pk=None):  # type: ignore
        notification = self.get_object()
        if notification.is_read:
            raise ValidationError("Notification already read")
        notification.mark_read()
        return Response(NotificationSerializer(notification).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="read-all")
    def mark_all_read(self, request):  # type: ignore
        updated = Notification.objects.filter(
            user=request.user, read_at__isnull=True
        ).update(read_at=timezone.now())
        return Response({"updated": updated}, status=status.HTTP_200_OK)
