import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime
from app.database import Base


def _new_id():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class Image(Base):
    __tablename__ = "images"

    id = Column(String, primary_key=True, default=_new_id)
    url = Column(String, nullable=False)                 # Cloudinary secure_url
    payment_id = Column(String, index=True, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
