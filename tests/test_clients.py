import re

import pytest
import requests
from cloudinary.exceptions import Error as CloudinaryError
from razorpay.errors import BadRequestError, ServerError
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from app.cloudinary_service import MediaUploader
from app.errors import AlreadyCaptured, CaptureFailed, OrderFailed, UploadFailed
from app.images import preview, to_png_data_url
from app.razorpay_service import PaymentGateway, make_receipt_id, to_minor_units


@pytest.mark.parametrize("amount, expected", [(1, 100), (499, 49900), (10.5, 1050), (19.99, 1999)])
def test_to_minor_units(amount, expected):
    assert to_minor_units(amount) == expected


def test_receipt_id_format():
    assert make_receipt_id(1700000000123) == "receipt_order_1700000000123"
    assert re.fullmatch(r"receipt_order_\d+", make_receipt_id())


def test_receipt_ids_differ_across_milliseconds():
    assert make_receipt_id(1) != make_receipt_id(2)


@pytest.mark.parametrize("image, expected", [
    ("data:image/jpeg;base64,AAAA", "data:image/png;base64,AAAA"),
    ("data:image/png;base64,BBBB", "data:image/png;base64,BBBB"),
    ("CCCC", "data:image/png;base64,CCCC"),
])
def test_to_png_data_url(image, expected):
    assert to_png_data_url(image) == expected


def test_preview_truncates():
    assert preview("x" * 150) == "x" * 100 + "..."
    assert preview(None) == "No image data"


def test_create_order_sends_order_data(mocker):
    client = mocker.Mock()
    client.order.create.return_value = {"id": "order_1"}

    order = PaymentGateway(client).create_order(500, "INR", "receipt_order_1")

    assert order == {"id": "order_1"}
    client.order.create.assert_called_once_with(
        data={"amount": 500, "currency": "INR", "receipt": "receipt_order_1"}
    )


def test_create_order_wraps_gateway_errors(mocker):
    client = mocker.Mock()
    client.order.create.side_effect = ServerError("upstream down")

    with pytest.raises(OrderFailed):
        PaymentGateway(client).create_order(500, "INR", "receipt_order_1")


def test_capture_already_captured(mocker):
    client = mocker.Mock()
    client.payment.capture.side_effect = BadRequestError("This payment has already been captured")

    with pytest.raises(AlreadyCaptured):
        PaymentGateway(client).capture_payment("pay_1", 500, "INR")


def test_capture_other_bad_request(mocker):
    client = mocker.Mock()
    client.payment.capture.side_effect = BadRequestError("The id provided does not exist")

    with pytest.raises(CaptureFailed) as excinfo:
        PaymentGateway(client).capture_payment("pay_1", 500, "INR")

    assert not isinstance(excinfo.value, AlreadyCaptured)
    assert excinfo.value.message == "The id provided does not exist"


def test_capture_transport_error(mocker):
    client = mocker.Mock()
    client.payment.capture.side_effect = requests.ConnectionError()

    with pytest.raises(CaptureFailed) as excinfo:
        PaymentGateway(client).capture_payment("pay_1", 500, "INR")

    assert excinfo.value.message == "Error in payment capture process"


def test_capture_passes_currency(mocker):
    client = mocker.Mock()
    client.payment.capture.return_value = {"status": "captured"}

    PaymentGateway(client).capture_payment("pay_1", 500, "INR")

    client.payment.capture.assert_called_once_with("pay_1", 500, {"currency": "INR"})


def test_upload_returns_secure_url(mocker):
    upload = mocker.patch(
        "cloudinary.uploader.upload",
        return_value={"secure_url": "https://res.cloudinary.com/demo/a.png"},
    )

    url = MediaUploader().upload("data:image/png;base64,AAAA")

    assert url == "https://res.cloudinary.com/demo/a.png"
    upload.assert_called_once_with("data:image/png;base64,AAAA", folder="custom_shirts")


def test_upload_wraps_cloudinary_errors(mocker):
    mocker.patch("cloudinary.uploader.upload", side_effect=CloudinaryError("Invalid image file"))

    with pytest.raises(UploadFailed) as excinfo:
        MediaUploader().upload("data:image/png;base64,AAAA")

    assert excinfo.value.message == "Invalid image file"


def test_upload_wraps_missing_credentials(mocker):
    mocker.patch("cloudinary.uploader.upload", side_effect=ValueError("Must supply api_key"))

    with pytest.raises(UploadFailed) as excinfo:
        MediaUploader().upload("data:image/png;base64,AAAA")

    assert excinfo.value.message == "Must supply api_key"


def test_upload_wraps_transport_errors(mocker):
    mocker.patch("cloudinary.uploader.upload", side_effect=Urllib3HTTPError("read timed out"))

    with pytest.raises(UploadFailed):
        MediaUploader().upload("data:image/png;base64,AAAA")
