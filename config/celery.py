import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("umc_media_hub")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # PENDING payments whose notification never arrived - every 10 minutes
    "reconcile-pending-payments": {
        "task": "payments.reconcile_pending_payments",
        "schedule": 600.0,
        "options": {"expires": 540},
    },
}

app.conf.timezone = "Asia/Jakarta"
