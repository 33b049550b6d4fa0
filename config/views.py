"""Project level views."""

from __future__ import annotations

import structlog
from django.db import connection  # type: ignore
from django.http import JsonResponse  # type: ignore
from django.views.decorators.http import require_http_methods  # type: ignore

logger = structlog.get_logger(__name__)


@require_http_methods(["GET"])
def healthz(request):
    """Health check for container orchestration."""
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as exc:
        logger.error("healthz.fail", error=str(exc))
        return JsonResponse({"status": "unhealthy", "error": str(exc)}, status=503)
    return JsonResponse({"status": "healthy", "database": "connected"}, status=200)
