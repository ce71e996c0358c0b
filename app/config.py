import os
from dataclasses import dataclass
from pathlib import Path
from typing import List
from dotenv import load_dotenv

# Force-load .env (Windows-safe, reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

PORT = 8080
DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024


def _clean_env(value: str) -> str:
    return (value or "").strip().strip("'").strip('"')


@dataclass(frozen=True)
class Settings:
    database_url: str
    razorpay_key_id: str
    razorpay_key_secret: str
    cloudinary_cloud_name: str
    cloudinary_api_key: str
    cloudinary_api_secret: str
    cors_origins: List[str]
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    capture_dedup: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from the environment at call time."""
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    return Settings(
        database_url=_clean_env(os.getenv("DATABASE_URL")),
        razorpay_key_id=_clean_env(os.getenv("RAZORPAY_KEY_ID")),
        razorpay_key_secret=_clean_env(os.getenv("RAZORPAY_KEY_SECRET")),
        cloudinary_cloud_name=_clean_env(os.getenv("CLOUDINARY_CLOUD_NAME")),
        cloudinary_api_key=_clean_env(os.getenv("CLOUDINARY_API_KEY")),
        cloudinary_api_secret=_clean_env(os.getenv("CLOUDINARY_API_SECRET")),
        cors_origins=origins,
        max_body_bytes=int(os.getenv("MAX_BODY_BYTES") or DEFAULT_MAX_BODY_BYTES),
        capture_dedup=os.getenv("CAPTURE_DEDUP", "false").lower() in ("1", "true", "yes"),
        log_level=_clean_env(os.getenv("LOG_LEVEL")) or "INFO",
    )
