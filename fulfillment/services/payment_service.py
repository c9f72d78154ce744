# fulfillment/services/payment_service.py
import hashlib
import hmac
import time

import requests

from fulfillment.domain.errors import PaymentVerificationFailed
from fulfillment.utils.retry import http_retry
from fulfillment.utils.settings import (
    PAYMENT_API_URL,
    PAYMENT_CURRENCY,
    PAYMENT_KEY_ID,
    PAYMENT_KEY_SECRET,
)
from fulfillment.utils.logging import get_logger

logger = get_logger(__name__)


class PaymentVerifier:
    """
    Weryfikacja potwierdzenia platnosci z bramki.
    HMAC-SHA256 z "order_ref|payment_ref" kluczem serwera.
    """

    def __init__(self, secret: str | None = None):
        self.secret = (secret if secret is not None else PAYMENT_KEY_SECRET).encode()

    def signature_for(self, order_ref: str, payment_ref: str) -> str:
        body = f"{order_ref}|{payment_ref}".encode()
        return hmac.new(self.secret, body, hashlib.sha256).hexdigest()

    def is_valid(self, order_ref: str, payment_ref: str, signature: str) -> bool:
        if not order_ref or not payment_ref or not signature or not self.secret:
            return False
        expected = self.signature_for(order_ref, payment_ref)
        #porownanie w stalym czasie
        return hmac.compare_digest(expected, signature)

    def verify(self, order_ref: str, payment_ref: str, signature: str) -> None:
        if not self.is_valid(order_ref, payment_ref, signature):
            logger.warning(f"Payment signature mismatch for remote order {order_ref}")
            raise PaymentVerificationFailed()
        logger.info(f"Payment {payment_ref} for remote order {order_ref} verified")


class PaymentGatewayClient:
    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: int = 5,
    ):
        self.base_url = (base_url or PAYMENT_API_URL).rstrip("/")
        self.key_id = key_id if key_id is not None else PAYMENT_KEY_ID
        self.key_secret = key_secret if key_secret is not None else PAYMENT_KEY_SECRET
        self.timeout = timeout

    @http_retry()
    def create_remote_order(self, amount_minor_units: int, currency: str = PAYMENT_CURRENCY, receipt: str | None = None) -> dict:
        url = f"{self.base_url}/orders"
        payload = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt or f"order_rcpt_{int(time.time() * 1000)}",
        }
        logger.info(f"PaymentGatewayClient POST {url} amount={amount_minor_units} {currency}")

        resp = requests.post(
            url,
            json=payload,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()
