import logging
import threading
from contextlib import contextmanager, nullcontext

from app.errors import AlreadyCaptured, MissingImage, NotCaptured, PaymentFlowError
from app.images import preview, to_png_data_url
from app.razorpay_service import CURRENCY, to_minor_units

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Payment successful and image uploaded"


class PaymentLocks:
    """One lock per payment id, dropped once its last holder releases it."""

    def __init__(self):
        self._guard = threading.Lock()
        # payment_id -> [lock, holders]
        self._locks = {}

    @contextmanager
    def hold(self, payment_id: str):
        with self._guard:
            entry = self._locks.setdefault(payment_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[payment_id]


class CaptureService:
    """
    Capture a payment, then upload the customer's image and store its URL.

    Steps run in order and stop at the first failure:
    capture (or fetch, if the gateway reports it was already captured),
    status check, image check, upload, persist.
    A payment captured before a later step fails stays captured.
    """

    def __init__(self, gateway, uploader, store, dedupe: bool = False, locks: PaymentLocks = None):
        self.gateway = gateway
        self.uploader = uploader
        self.store = store
        self.dedupe = dedupe
        self.locks = locks or PaymentLocks()

    def capture(self, payment_id: str, amount, image=None) -> dict:
        logger.info("capture.start payment_id=%s image=%s", payment_id, preview(image))
        guard = self.locks.hold(payment_id) if self.dedupe else nullcontext()
        try:
            with guard:
                return self._run(payment_id, amount, image)
        except PaymentFlowError as exc:
            logger.error("capture.failed payment_id=%s error=%s: %s",
                         payment_id, type(exc).__name__, exc.message)
            raise
        except Exception as exc:
            logger.exception("capture.failed payment_id=%s unexpected error", payment_id)
            raise PaymentFlowError(str(exc) or None) from exc

    def _run(self, payment_id, amount, image):
        payment = self._capture_or_fetch(payment_id, to_minor_units(amount))

        if payment.get("status") != "captured":
            raise NotCaptured()
        logger.info("capture.captured payment_id=%s", payment_id)

        if not image:
            raise MissingImage()

        if self.dedupe:
            existing = self.store.find_by_payment(payment_id)
            if existing is not None:
                logger.info("capture.duplicate payment_id=%s url=%s", payment_id, existing.url)
                return {"message": SUCCESS_MESSAGE, "imageUrl": existing.url}

        url = self.uploader.upload(to_png_data_url(image))
        logger.info("capture.uploaded payment_id=%s url=%s", payment_id, url)

        record = self.store.create(url, payment_id=payment_id)
        logger.info("capture.saved payment_id=%s image_id=%s", payment_id, record.id)

        return {"message": SUCCESS_MESSAGE, "imageUrl": url}

    def _capture_or_fetch(self, payment_id, amount_minor):
        try:
            return self.gateway.capture_payment(payment_id, amount_minor, CURRENCY)
        except AlreadyCaptured:
            logger.info("capture.already_captured payment_id=%s, fetching", payment_id)
            return self.gateway.fetch_payment(payment_id)
