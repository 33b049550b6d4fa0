"""
Midtrans Snap gateway client

Thin wrapper over the two Midtrans endpoints this project needs:

- Snap ``POST /snap/v1/transactions`` opens a payment session and returns
  a token plus a hosted payment page URL.
- Core ``GET /v2/{order_id}/status`` returns the authoritative status of
  a transaction.

Both use HTTP basic auth with the server key as username. Every request
has a bounded timeout. When no server key is configured the client runs
in emulation mode: sessions get a fake token and every status is
``pending``, so local development works without credentials.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import uuid
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional

import requests
from django.conf import settings

from shared.domain.exceptions import GatewayError

logger = logging.getLogger(__name__)

SNAP_URLS = {
    True: "https://app.midtrans.com/snap/v1/transactions",
    False: "https://app.sandbox.midtrans.com/snap/v1/transactions",
}
CORE_API_URLS = {
    True: "https://api.midtrans.com/v2/",
    False: "https://api.sandbox.midtrans.com/v2/",
}

# Status 407 means "expired" and still carries a valid status body
NON_ERROR_STATUS_CODES = {"200", "201", "407"}


@dataclass(frozen=True)
class GatewaySession:
    token: str
    redirect_url: str


@dataclass(frozen=True)
class TransactionStatus:
    transaction_status: str
    fraud_status: Optional[str] = None
    status_code: Optional[str] = None
    gross_amount: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: dict) -> "TransactionStatus":
        return cls(
            transaction_status=str(data.get("transaction_status") or ""),
            fraud_status=data.get("fraud_status"),
            status_code=str(data["status_code"]) if data.get("status_code") is not None else None,
            gross_amount=data.get("gross_amount"),
            raw=data,
        )


class MidtransClient:
    """Midtrans Snap + Core API client."""

    def __init__(
        self,
        server_key: str = "",
        client_key: str = "",
        is_production: bool = False,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
    ):
        self.server_key = server_key
        self.client_key = client_key
        self.is_production = is_production
        self.timeout = timeout
        self.http = session or requests.Session()

    @property
    def emulated(self) -> bool:
        return not self.server_key

    @property
    def snap_url(self) -> str:
        return SNAP_URLS[self.is_production]

    def status_url(self, order_reference: str) -> str:
        return f"{CORE_API_URLS[self.is_production]}{order_reference}/status"

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "Content-Type": "application/json"}

    def create_session(
        self,
        order_reference: str,
        gross_amount: int,
        customer: dict[str, str],
        enabled_payments: list[str],
        callbacks: Optional[dict[str, str]] = None,
    ) -> GatewaySession:
        """Open a Snap payment session for ``order_reference``."""
        if self.emulated:
            logger.warning("Midtrans emulation mode (no MIDTRANS_SERVER_KEY configured)")
            token = uuid.uuid4().hex
            return GatewaySession(
                token=token,
                redirect_url=f"https://app.sandbox.midtrans.com/snap/v4/redirection/{token}",
            )

        payload: dict[str, Any] = {
            "transaction_details": {
                "order_id": order_reference,
                "gross_amount": int(gross_amount),
            },
            "customer_details": customer,
            "enabled_payments": enabled_payments,
        }
        if callbacks:
            payload["callbacks"] = callbacks

        logger.info(f"Creating Midtrans Snap session {order_reference} for {gross_amount}")
        data = self._request("post", self.snap_url, json=payload)

        token = data.get("token")
        redirect_url = data.get("redirect_url")
        if not token or not redirect_url:
            raise GatewayError("Midtrans returned no Snap token", detail=data)
        return GatewaySession(token=token, redirect_url=redirect_url)

    def get_transaction_status(self, order_reference: str) -> TransactionStatus:
        """Authoritative status of ``order_reference`` as known to Midtrans."""
        if self.emulated:
            return TransactionStatus(
                transaction_status="pending",
                status_code="201",
                raw={"order_id": order_reference, "transaction_status": "pending"},
            )

        data = self._request("get", self.status_url(order_reference))
        # Core API reports errors in the body with HTTP 200
        status_code = str(data.get("status_code", "200"))
        if status_code not in NON_ERROR_STATUS_CODES and status_code.isdigit() and int(status_code) >= 400:
            raise GatewayError(
                data.get("status_message") or f"Midtrans status check failed ({status_code})",
                detail=data,
                http_status=int(status_code),
            )
        return TransactionStatus.from_response(data)

    def signature_for(self, order_id: str, status_code: str, gross_amount: str) -> str:
        raw = f"{order_id}{status_code}{gross_amount}{self.server_key}"
        return hashlib.sha512(raw.encode()).hexdigest()

    def verify_signature(self, payload: dict) -> bool:
        """Check the notification's signature_key against our server key."""
        signature = payload.get("signature_key")
        if not signature or not self.server_key:
            return False
        expected = self.signature_for(
            str(payload.get("order_id", "")),
            str(payload.get("status_code", "")),
            str(payload.get("gross_amount", "")),
        )
        return hmac.compare_digest(expected, str(signature))

    def _request(self, method: str, url: str, **kwargs) -> dict:
        try:
            response = self.http.request(
                method,
                url,
                auth=(self.server_key, ""),
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.Timeout as e:
            logger.error(f"Midtrans request timed out: {method.upper()} {url}")
            raise GatewayError("Payment gateway timed out") from e
        except requests.RequestException as e:
            logger.error(f"Midtrans request failed: {method.upper()} {url}: {e}")
            raise GatewayError(f"Payment gateway unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {"body": response.text[:500]}

        if response.status_code >= 400:
            messages = data.get("error_messages") or data.get("status_message") or response.reason
            logger.error(f"Midtrans returned HTTP {response.status_code}: {messages}")
            raise GatewayError(
                f"Payment gateway error: {messages}",
                detail=data,
                http_status=response.status_code,
            )
        return data


@lru_cache(maxsize=1)
def get_gateway_client() -> MidtransClient:
    """One client per process, built from settings."""
    return MidtransClient(
        server_key=settings.MIDTRANS_SERVER_KEY,
        client_key=settings.MIDTRANS_CLIENT_KEY,
        is_production=settings.MIDTRANS_IS_PRODUCTION,
        timeout=settings.MIDTRANS_TIMEOUT,
    )
