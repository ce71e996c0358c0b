import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from app.capture import CaptureService
from app.dependencies import get_capture_service, get_gateway, get_settings
from app.errors import OrderFailed
from app.razorpay_service import CURRENCY, make_receipt_id, to_minor_units

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api")


class OrderRequest(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)


class CaptureRequest(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    image: Optional[str] = None


@router.post("/orders")
def create_order_api(request: OrderRequest, gateway=Depends(get_gateway)):
    receipt = make_receipt_id()
    try:
        order = gateway.create_order(to_minor_units(request.amount), CURRENCY, receipt)
    except OrderFailed as exc:
        logger.error("orders.create failed receipt=%s: %s", receipt, exc.message)
        return PlainTextResponse(OrderFailed.default_message, status_code=500)
    logger.info("orders.create ok receipt=%s order_id=%s", receipt, order.get("id"))
    return order


@router.post("/capture/{payment_id}")
def capture_payment_api(
    payment_id: str,
    request: CaptureRequest,
    service: CaptureService = Depends(get_capture_service),
):
    return service.capture(payment_id, request.amount, request.image)


@router.get("/razorpay-key")
def razorpay_key(settings=Depends(get_settings)):
    return {"key": settings.razorpay_key_id}
