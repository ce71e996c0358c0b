"""
Errors raised along the order and capture flows.

Each class carries the HTTP status it maps to and the message sent back
as ``{"error": message}``.
"""


class PaymentFlowError(Exception):
    status_code = 500
    default_message = "Error in payment capture process"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class CaptureFailed(PaymentFlowError):
    """Gateway rejected the capture."""


class AlreadyCaptured(CaptureFailed):
    """Gateway says the payment was captured earlier. Recovered by a fetch."""


class NotCaptured(PaymentFlowError):
    default_message = "Payment not captured"


class MissingImage(PaymentFlowError):
    status_code = 400
    default_message = "No image data received"


class UploadFailed(PaymentFlowError):
    pass


class PersistenceFailed(PaymentFlowError):
    pass


class OrderFailed(PaymentFlowError):
    default_message = "Error creating order"
