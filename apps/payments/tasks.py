"""Celery tasks for payments."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import GatewayError

from .application.reconciliation import Outcome, WebhookReconciliationEngine
from .models import Payment

logger = logging.getLogger(__name__)


@shared_task(name="payments.reconcile_pending_payments")
def reconcile_pending_payments() -> dict[str, int]:
    """
    Pull the gateway status of stale PENDING payments.

    Covers notifications that never arrived. Runs every 10 minutes
    through Celery Beat.

    Returns:
        dict: {"checked": n, "updated": n, "errors": n}
    """
    cutoff = timezone.now() - timedelta(minutes=settings.PAYMENT_RECONCILE_AFTER_MINUTES)
    stale = Payment.objects.filter(status=Payment.Status.PENDING, created_at__lte=cutoff)

    engine = WebhookReconciliationEngine()
    stats = {"checked": 0, "updated": 0, "errors": 0}
    for payment in stale.iterator():
        stats["checked"] += 1
        try:
            result = engine.reconcile(payment)
        except GatewayError as e:
            stats["errors"] += 1
            logger.warning(f"Could not reconcile payment {payment.pk}: {e}")
            continue
        if result.outcome == Outcome.UPDATED:
            stats["updated"] += 1

    logger.info(f"Pending payment sweep: {stats}")
    return stats
