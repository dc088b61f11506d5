"""
Product Service configuration using shared patterns
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the product service directory path
PRODUCT_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = PRODUCT_SERVICE_DIR / ".env"


class ProductSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Product Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Service specific
    SERVICE_NAME: str = "product-service"

    # Database
    PRODUCT_DATABASE_URL: str

    # Security (tokens are issued by the user service)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"

    # Kafka for events
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_GROUP_ID: str = "product-service-group"
    KAFKA_TOPIC_USER_DELETED: str = "user.deleted"
    KAFKA_TOPIC_PRODUCT_DELETED: str = "product.deleted"

    # Cascade consumer retry policy
    CONSUMER_MAX_ATTEMPTS: int = 3
    CONSUMER_RETRY_DELAY: float = 0.5

    # Media service (internal calls and public image links)
    MEDIA_SERVICE_URL: str = "http://media-service:8003"
    MEDIA_PUBLIC_URL: str = "http://localhost:8003/api/v1/media"
    SERVICE_CALL_TIMEOUT: float = 5.0
    RECONCILE_PROBE_CONCURRENCY: int = 8

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["*"]
    CORS_HEADERS: List[str] = ["*"]


# Create a singleton instance
_settings_instance = None


def get_settings() -> ProductSettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = ProductSettings()
    return _settings_instance
