"""API views for payments.

- ``PaymentViewSet``: payment creation, listing, detail, manual status
  check and the admin per-booking summary.
- ``midtrans_notification``: unauthenticated webhook receiver. Beyond
  bodies that are not JSON and bad signatures it always answers 200, since the
  gateway retries anything else.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal

import structlog
from django.conf import settings  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from django.views.decorators.csrf import csrf_exempt  # type: ignore
from django.views.decorators.http import require_POST  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.models import Booking
from apps.users.permissions import IsAdminRole, IsOwnerOrAdmin, is_admin_user

from .application.reconciliation import Outcome, ReconciliationResult, WebhookReconciliationEngine
from .application.session_manager import PaymentSessionManager
from .gateway import get_gateway_client
from .models import Payment
from .serializers import (
    AdminBookingDetailSerializer,
    PaymentCreateSerializer,
    PaymentHistorySerializer,
    PaymentSerializer,
)

logger = logging.getLogger(__name__)
webhook_logger = structlog.get_logger("apps.payments.webhook")


class PaymentViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Payments of the current user; admins see all of them."""

    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated, IsOwnerOrAdmin]
    owner_field = "booking.user_id"
    filterset_fields = ["status", "method"]
    queryset = Payment.objects.select_related("booking", "booking__user")

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        if self.action == "list" and not is_admin_user(self.request.user):
            return qs.filter(booking__user=self.request.user)
        return qs

    @action(
        detail=False,
        methods=["post"],
        url_path=r"create/(?P<booking_id>[^/.]+)",
        serializer_class=PaymentCreateSerializer,
    )
    def create_for_booking(self, request, booking_id=None):  # type: ignore
        serializer = PaymentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = PaymentSessionManager().create_payment(
            booking_id=booking_id,
            user_id=request.user.id,
            method=serializer.validated_data.get("method"),
        )
        return Response(
            {
                "payment": PaymentSerializer(session.payment).data,
                "payment_url": session.redirect_url,
                "token": session.token,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["get"], url_path="status")
    def check_status(self, request, pk=None):  # type: ignore
        """Ask the gateway for the current status and reconcile the payment with it."""
        payment = self.get_object()
        result = WebhookReconciliationEngine().reconcile(payment)
        payment.refresh_from_db()
        return Response({
            "payment_status": payment.status,
            "gateway_status": result.gateway_status,
            "outcome": result.outcome,
            "details": result.details,
        })

    @action(
        detail=False,
        methods=["get"],
        url_path=r"admin/by-booking/(?P<booking_id>[^/.]+)",
        permission_classes=[IsAdminRole],
    )
    def admin_by_booking(self, request, booking_id=None):  # type: ignore
        booking = get_object_or_404(
            Booking.objects.select_related("user").prefetch_related("items__service", "items__package"),
            pk=booking_id,
        )
        payments = list(booking.payments.order_by("-created_at"))
        latest = payments[0] if payments else None
        subtotal_sum = sum((item.subtotal for item in booking.items.all()), Decimal("0.00"))

        return Response({
            "booking": AdminBookingDetailSerializer(booking).data,
            "summary": {
                "is_paid": any(p.status == Payment.Status.PAID for p in payments),
                "payment_count": len(payments),
                "latest_payment_status": latest.status if latest else None,
                "total_amount": booking.total_amount,
                "duration_days": booking.duration_days,
                "subtotal_sum": subtotal_sum,
                "totals_consistent": abs(subtotal_sum - booking.total_amount) < Decimal("0.01"),
            },
            "payments": PaymentHistorySerializer(payments, many=True).data,
            "latest_payment": PaymentHistorySerializer(latest).data if latest else None,
        })


@csrf_exempt
@require_POST
def midtrans_notification(request):
    """Midtrans HTTP notification receiver."""
    try:
        payload = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        webhook_logger.warning("midtrans.webhook.invalid_json")
        return JsonResponse({"status": "error", "message": "Invalid JSON"}, status=400)

    if not isinstance(payload, dict) or not payload.get("order_id"):
        webhook_logger.warning("midtrans.webhook.missing_order_id")
        return JsonResponse({"status": "ok", **ReconciliationResult(Outcome.NOT_FOUND).to_dict()}, status=200)

    order_id = payload["order_id"]
    log = webhook_logger.bind(
        order_id=order_id,
        transaction_status=payload.get("transaction_status"),
        fraud_status=payload.get("fraud_status"),
    )
    log.info("midtrans.webhook.received")

    if settings.MIDTRANS_VERIFY_SIGNATURE and not get_gateway_client().verify_signature(payload):
        log.warning("midtrans.webhook.invalid_signature")
        return JsonResponse({"status": "error", "message": "Invalid signature"}, status=403)

    result = WebhookReconciliationEngine().handle_notification(payload)
    log.info("midtrans.webhook.processed", **result.to_dict())
    return JsonResponse({"status": "ok", **result.to_dict()}, status=200)
