"""
Domain Exceptions

Error taxonomy shared by the booking and payment domains. Application
services raise these; the DRF exception handler translates them into
HTTP responses. Webhook processing is the only path that catches them
instead of surfacing them.
"""


class DomainError(Exception):
    """Base class for all expected business errors"""

    default_message = "Domain error"
    code = "domain_error"

    def __init__(self, message: str | None = None, *, detail=None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed input: missing dates or items, non-positive amounts"""

    default_message = "Invalid input"
    code = "validation_error"


class UnauthorizedError(DomainError):
    """Caller is authenticated but does not own the resource"""

    default_message = "Not authorized for this resource"
    code = "unauthorized"


class ForbiddenError(DomainError):
    """Caller does not have the required role"""

    default_message = "Access denied"
    code = "forbidden"


class NotFoundError(DomainError):
    """Booking, service, package or payment does not exist"""

    default_message = "Not found"
    code = "not_found"


class ConflictError(DomainError):
    """Illegal state transition, duplicate active payment, inactive resource"""

    default_message = "Conflict with current state"
    code = "conflict"


class GatewayError(DomainError):
    """The external payment provider failed or rejected the request"""

    default_message = "Payment gateway error"
    code = "gateway_error"

    def __init__(self, message: str | None = None, *, detail=None, http_status: int | None = None):
        super().__init__(message, detail=detail)
        self.http_status = http_status

    @property
    def is_client_error(self) -> bool:
        """True when the provider rejected our request (4xx)"""
        return self.http_status is not None and 400 <= self.http_status < 500
