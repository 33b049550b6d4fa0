"""DRF exception handler translating domain errors into HTTP responses.

Every error body has the same envelope::

    {"success": false, "error": <message or detail>, "code": <code>}

Unexpected exceptions are not turned into responses here: they propagate
to Django, which logs them and answers 500.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ObjectDoesNotExist  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain import exceptions as domain

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    domain.ValidationError: status.HTTP_400_BAD_REQUEST,
    domain.UnauthorizedError: status.HTTP_403_FORBIDDEN,
    domain.ForbiddenError: status.HTTP_403_FORBIDDEN,
    domain.NotFoundError: status.HTTP_404_NOT_FOUND,
    domain.ConflictError: status.HTTP_409_CONFLICT,
    domain.GatewayError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: domain.DomainError) -> int:
    if isinstance(exc, domain.GatewayError) and exc.is_client_error:
        return status.HTTP_400_BAD_REQUEST
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc, context):
    if isinstance(exc, domain.DomainError):
        code = status_for(exc)
        body = {"success": False, "error": exc.message, "code": exc.code}
        if exc.detail is not None:
            body["detail"] = exc.detail
        log = logger.warning if code >= 500 else logger.info
        log(f"{exc.__class__.__name__} in {context.get('view').__class__.__name__}: {exc.message}")
        return Response(body, status=code)

    if isinstance(exc, ObjectDoesNotExist):
        return Response(
            {"success": False, "error": "Not found.", "code": "not_found"},
            status=status.HTTP_404_NOT_FOUND,
        )

    # Malformed lookups, e.g. a booking id that is not a UUID
    if isinstance(exc, DjangoValidationError):
        return Response(
            {"success": False, "error": exc.messages, "code": "invalid"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    # DRF's own exceptions (validation, authentication, throttling...)
    response = exception_handler(exc, context)
    if response is not None:
        response.data = {
            "success": False,
            "error": response.data,
            "code": getattr(exc, "default_code", "error"),
        }
    return response
