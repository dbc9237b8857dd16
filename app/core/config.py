from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Value shipped in the sample .env; treated the same as an unset key
PLACEHOLDER_API_KEY = "your_api_key_here"


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # "development" or "production"
    LOG_LEVEL: str = "INFO"

    GOOGLE_MAPS_API_KEY: Optional[str] = None
    TOMTOM_API_KEY: Optional[str] = None
    TRAFFIC_REQUEST_TIMEOUT_SECONDS: float = 10.0

    # Concurrent estimator calls per travel-matrix batch
    TRAVEL_MATRIX_BATCH_SIZE: int = 5

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    @property
    def google_maps_configured(self) -> bool:
        return bool(self.GOOGLE_MAPS_API_KEY) and self.GOOGLE_MAPS_API_KEY != PLACEHOLDER_API_KEY

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
