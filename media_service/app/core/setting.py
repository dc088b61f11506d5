"""
Media Service configuration using shared patterns
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the media service directory path
MEDIA_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = MEDIA_SERVICE_DIR / ".env"


class MediaSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Media Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Service specific
    SERVICE_NAME: str = "media-service"

    # Database
    MEDIA_DATABASE_URL: str

    # Security (tokens are issued by the user service)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_GROUP_ID: str = "media-service-group"
    KAFKA_TOPIC_USER_DELETED: str = "user.deleted"
    KAFKA_TOPIC_PRODUCT_DELETED: str = "product.deleted"

    # Cascade consumer retry policy
    CONSUMER_MAX_ATTEMPTS: int = 3
    CONSUMER_RETRY_DELAY: float = 0.5

    # Stored files
    MEDIA_STORAGE_DIR: str = str(MEDIA_SERVICE_DIR / "uploads")
    MAX_UPLOAD_SIZE: int = 2 * 1024 * 1024
    MEDIA_PUBLIC_URL: str = "http://localhost:8003/api/v1/media"

    # Product service (reference removal)
    PRODUCT_SERVICE_URL: str = "http://product-service:8002"
    SERVICE_CALL_TIMEOUT: float = 5.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]


# Create a singleton instance
_settings_instance = None


def get_settings() -> MediaSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = MediaSettings()
    return _settings_instance
