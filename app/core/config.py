import logging
import os
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
        self.mongodb_database = os.getenv("MONGODB_DATABASE", "accounts")
        self.access_token_secret = self._get("ACCESS_TOKEN_SECRET")
        self.access_token_expiry_minutes = self._get_int("ACCESS_TOKEN_EXPIRY_MINUTES", default=15)
        self.refresh_token_secret = self._get("REFRESH_TOKEN_SECRET")
        self.refresh_token_expiry_days = self._get_int("REFRESH_TOKEN_EXPIRY_DAYS", default=10)
        self.cloudinary_cloud_name = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.cloudinary_api_key = os.getenv("CLOUDINARY_API_KEY")
        self.cloudinary_api_secret = os.getenv("CLOUDINARY_API_SECRET")
        self.cloudinary_folder = os.getenv("CLOUDINARY_FOLDER")
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        self.cookie_secure = self._get_bool("COOKIE_SECURE", default=True)
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = self._get_int("PORT", default=8000)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
        self.cors_allow_origins = self._get_list("CORS_ALLOW_ORIGINS", default=["*"])
        if self.access_token_secret == self.refresh_token_secret:
            logger.warning(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are identical. Use distinct secrets in production."
            )

    @staticmethod
    def _get(key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise RuntimeError(f"Missing required environment variable: {key}")
        return value

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.strip().lower() in _TRUE_VALUES

    @staticmethod
    def _get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if not value:
            return default
        items = [item.strip() for item in value.split(",") if item.strip()]
        return items or default
