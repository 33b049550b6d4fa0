"""API views for the booking domain."""

from __future__ import annotations

import logging

from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdminRole, IsOwnerOrAdmin, is_admin_user

from .application.command_handlers import (
    UNSET,
    BookingItemInput,
    CancelBookingCommand,
    CancelBookingHandler,
    CompleteBookingCommand,
    CompleteBookingHandler,
    ConfirmBookingCommand,
    ConfirmBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    RejectBookingCommand,
    RejectBookingHandler,
    UpdateBookingCommand,
    UpdateBookingHandler,
)
from .models import Booking
from .serializers import (
    AdminNotesSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingUpdateSerializer,
    RejectSerializer,
)

logger = logging.getLogger(__name__)


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Bookings of the current user; admins see every booking.

    Writes never go through model serializers: each one builds a command
    and hands it to the matching handler.
    """

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]
    filterset_fields = ["status"]
    queryset = Booking.objects.select_related("user", "approver").prefetch_related(
        "items__service", "items__package"
    )

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if is_admin_user(self.request.user):
            return qs
        return qs.filter(user=self.request.user)

    def _respond(self, booking: Booking, code: int = status.HTTP_200_OK) -> Response:
        booking = self.queryset.get(pk=booking.pk)
        return Response(BookingSerializer(booking).data, status=code)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = CreateBookingHandler().handle(CreateBookingCommand(
            user_id=request.user.id,
            start_date=data["start_date"],
            end_date=data["end_date"],
            notes=data.get("notes", ""),
            items=[BookingItemInput(**item) for item in data["items"]],
        ))
        return self._respond(booking, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None, *args, **kwargs):  # type: ignore
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        booking = UpdateBookingHandler().handle(UpdateBookingCommand(
            booking_id=pk,
            owner_id=request.user.id,
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            notes=data.get("notes", UNSET),
        ))
        return self._respond(booking)

    def destroy(self, request, pk=None, *args, **kwargs):  # type: ignore
        """Cancelling replaces deletion: bookings are never removed."""
        booking = CancelBookingHandler().handle(
            CancelBookingCommand(booking_id=pk, owner_id=request.user.id)
        )
        return self._respond(booking)

    @action(detail=True, methods=["patch"], permission_classes=[IsAdminRole])
    def confirm(self, request, pk=None):  # type: ignore
        serializer = AdminNotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = ConfirmBookingHandler().handle(ConfirmBookingCommand(
            booking_id=pk,
            admin_id=request.user.id,
            notes=serializer.validated_data.get("notes") or None,
        ))
        return self._respond(booking)

    @action(detail=True, methods=["patch"], permission_classes=[IsAdminRole])
    def reject(self, request, pk=None):  # type: ignore
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = RejectBookingHandler().handle(RejectBookingCommand(
            booking_id=pk,
            admin_id=request.user.id,
            reason=serializer.validated_data.get("reason") or None,
        ))
        return self._respond(booking)

    @action(detail=True, methods=["patch"], permission_classes=[IsAdminRole])
    def complete(self, request, pk=None):  # type: ignore
        booking = CompleteBookingHandler().handle(
            CompleteBookingCommand(booking_id=pk, admin_id=request.user.id)
        )
        return self._respond(booking)
