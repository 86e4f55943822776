"""Payment gateway adapter.

Checkout only needs two operations: authorize-and-capture a card payment and
refund it again. ``StripeGateway`` talks to the Stripe REST API directly with
requests; tests swap in their own ``PaymentGateway`` through
``get_payment_gateway``.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from app.config import settings
from app.errors import PaymentFailed

logger = logging.getLogger(__name__)


@dataclass
class PaymentAuthorization:
    id: str
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


class PaymentGateway:
    """Interface every payment processor adapter implements."""

    def authorize_and_capture(
        self,
        amount_minor: int,
        currency: str,
        payment_method_id: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> PaymentAuthorization:
        raise NotImplementedError

    def refund(self, payment_id: str) -> None:
        raise NotImplementedError


class StripeGateway(PaymentGateway):
    """Handles Stripe PaymentIntents (confirmed server-side, no redirects)."""

    def __init__(self, secret_key: Optional[str], api_base: str, timeout: float = 10.0, session=None):
        self.secret_key = secret_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, data: dict) -> dict:
        if not self.secret_key:
            raise PaymentFailed("payment gateway is not configured")
        try:
            response = self.session.post(
                f"{self.api_base}{path}",
                data=data,
                auth=(self.secret_key, ""),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("Stripe request %s failed: %s", path, e)
            raise PaymentFailed(str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("error", {}).get("message") or f"gateway returned HTTP {response.status_code}"
            logger.warning("Stripe %s rejected: %s", path, message)
            raise PaymentFailed(message)
        return body

    def authorize_and_capture(self, amount_minor, currency, payment_method_id, metadata=None):
        data = {
            "amount": amount_minor,
            "currency": currency,
            "payment_method": payment_method_id,
            "confirm": "true",
            "automatic_payment_methods[enabled]": "true",
            "automatic_payment_methods[allow_redirects]": "never",
        }
        for key, value in (metadata or {}).items():
            data[f"metadata[{key}]"] = value
        body = self._post("/payment_intents", data)
        auth = PaymentAuthorization(id=body["id"], status=body.get("status", "unknown"))
        logger.info("Payment intent %s: %s (%s %s)", auth.id, auth.status, amount_minor, currency)
        return auth

    def refund(self, payment_id: str) -> None:
        body = self._post("/refunds", {"payment_intent": payment_id})
        logger.info("Refund %s issued for %s", body.get("id"), payment_id)


def get_payment_gateway() -> PaymentGateway:
    return StripeGateway(
        secret_key=settings.stripe_secret_key,
        api_base=settings.stripe_api_base,
        timeout=settings.payment_timeout,
    )
