import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from app.errors import UploadFailed

UPLOAD_FOLDER = "custom_shirts"

# ValueError covers missing credentials ("Must supply api_key")
_UPLOAD_ERRORS = (CloudinaryError, Urllib3HTTPError, ValueError)


def configure_cloudinary(cloud_name: str, api_key: str, api_secret: str):
    cloudinary.config(
        cloud_name=cloud_name,
        api_key=api_key,
        api_secret=api_secret,
        secure=True,
    )


class MediaUploader:
    def __init__(self, folder: str = UPLOAD_FOLDER):
        self.folder = folder

    def upload(self, data_url: str) -> str:
        """Upload a data URL and return the hosted ``secure_url``."""
        try:
            response = cloudinary.uploader.upload(data_url, folder=self.folder)
        except _UPLOAD_ERRORS as exc:
            raise UploadFailed(str(exc) or None) from exc
        secure_url = response.get("secure_url")
        if not secure_url:
            raise UploadFailed("Upload response has no secure_url")
        return secure_url
