import re

_DATA_URL_PREFIX = re.compile(r"^data:image/\w+;base64,")


def to_png_data_url(image: str) -> str:
    # Declared subtype is discarded, the payload is always sent as PNG.
    payload = _DATA_URL_PREFIX.sub("", image, count=1)
    return f"data:image/png;base64,{payload}"


def preview(image) -> str:
    return f"{image[:100]}..." if image else "No image data"
