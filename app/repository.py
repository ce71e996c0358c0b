import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from app.errors import PersistenceFailed
from app.models import Image

logger = logging.getLogger(__name__)


class ImageRecordStore:
    """Image records, one session per call."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def create(self, url: str, payment_id: Optional[str] = None) -> Image:
        db = self._session_factory()
        try:
            image = Image(url=url, payment_id=payment_id)
            db.add(image)
            db.commit()
            db.refresh(image)
            return image
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("images.create failed (payment_id=%s)", payment_id)
            raise PersistenceFailed(str(exc)) from exc
        finally:
            db.close()

    def find_by_payment(self, payment_id: str) -> Optional[Image]:
        db = self._session_factory()
        try:
            return db.query(Image).filter_by(payment_id=payment_id).first()
        except SQLAlchemyError as exc:
            logger.exception("images.find_by_payment failed (payment_id=%s)", payment_id)
            raise PersistenceFailed(str(exc)) from exc
        finally:
            db.close()
