import time

import razorpay
import requests
from razorpay.errors import BadRequestError, GatewayError, ServerError

from app.errors import AlreadyCaptured, CaptureFailed, OrderFailed

CURRENCY = "INR"
ALREADY_CAPTURED = "This payment has already been captured"

_GATEWAY_ERRORS = (BadRequestError, GatewayError, ServerError, requests.RequestException)


def to_minor_units(amount) -> int:
    # whole rupees -> paise
    return int(round(amount * 100))


def make_receipt_id(now_ms: int = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"receipt_order_{now_ms}"


class PaymentGateway:
    def __init__(self, client):
        self.client = client

    @classmethod
    def from_credentials(cls, key_id: str, key_secret: str):
        return cls(razorpay.Client(auth=(key_id, key_secret)))

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> dict:
        try:
            return self.client.order.create(data={
                "amount": amount_minor,
                "currency": currency,
                "receipt": receipt,
            })
        except _GATEWAY_ERRORS as exc:
            raise OrderFailed(str(exc) or None) from exc

    def capture_payment(self, payment_id: str, amount_minor: int, currency: str) -> dict:
        try:
            return self.client.payment.capture(payment_id, amount_minor, {"currency": currency})
        except BadRequestError as exc:
            if ALREADY_CAPTURED in str(exc):
                raise AlreadyCaptured(str(exc)) from exc
            raise CaptureFailed(str(exc) or None) from exc
        except _GATEWAY_ERRORS as exc:
            raise CaptureFailed(str(exc) or None) from exc

    def fetch_payment(self, payment_id: str) -> dict:
        try:
            return self.client.payment.fetch(payment_id)
        except _GATEWAY_ERRORS as exc:
            raise CaptureFailed(str(exc) or None) from exc
