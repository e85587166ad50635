# horeca_catalog/core/config.py
import os
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    PROJECT_NAME: str = "HoReCa Catalog API"
    API_PREFIX: str = "/api"

    # MongoDB Settings
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "horeca_catalog")

    # 카테고리 트리 캐시 (초)
    CATEGORY_CACHE_TTL_SECONDS: int = 10 * 60

    # Pagination
    DEFAULT_PAGE_SIZE: int = 24
    MAX_PAGE_SIZE: int = 200
    ENQUIRY_PAGE_SIZE: int = 50
    RELATED_ENQUIRIES_LIMIT: int = 20

    # Logging / OpenTelemetry
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    OTEL_ENABLED: bool = False
    OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "catalog-service")
    OTEL_EXPORTER_OTLP_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "otel-collector:4317")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


settings = Settings()
