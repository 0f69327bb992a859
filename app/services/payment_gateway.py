# app/services/payment_gateway.py
import hashlib
import hmac
import logging
import uuid

from app.core.config import settings

logger = logging.getLogger(__name__)


class PaymentGateway:
    """
    Client-side contract of the payment provider.

    Orders are identified locally (no remote call is made); settlement
    callbacks are authenticated with an HMAC-SHA256 signature over
    "<order_id>|<payment_id>" keyed with the shared secret.
    """

    def __init__(
        self,
        name: str = None,
        public_key: str = None,
        secret: str = None,
        currency: str = None,
    ):
        self.name = name or settings.payment_gateway_name
        self.public_key = public_key or settings.payment_gateway_key
        self.secret = secret or settings.payment_gateway_secret
        self.currency = currency or settings.payment_currency

    def create_order_id(self) -> str:
        return f"order_mock_{uuid.uuid4().hex}"

    def sign(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(
            self.secret.encode("utf-8"), message, hashlib.sha256
        ).hexdigest()

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        expected = self.sign(order_id, payment_id)
        is_valid = hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
        if not is_valid:
            logger.warning(f"Signature mismatch for gateway order {order_id}")
        return is_valid


payment_gateway = PaymentGateway()


def get_payment_gateway() -> PaymentGateway:
    return payment_gateway
