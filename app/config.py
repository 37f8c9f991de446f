"""
Application configuration via Pydantic Settings
"""
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application Settings
    APP_NAME: str = "ocr-api"
    APP_VERSION: str = "1.0.0"
    API_VERSION: str = "v1"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"

    # Upload Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    MAX_BATCH_SIZE: int = 10
    ALLOWED_IMAGE_FORMATS: str = "jpeg,png,gif"

    # Google Cloud Vision Settings
    GOOGLE_APPLICATION_CREDENTIALS_JSON: str = ""
    VISION_TIMEOUT_SECONDS: Optional[float] = None
    VISION_MAX_WORKERS: int = 10

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_GLOBAL: str = "300/minute"
    RATE_LIMIT_OCR: str = "30/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def api_prefix(self) -> str:
        """URL prefix for versioned routes"""
        return f"/api/{self.API_VERSION}"

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from a comma separated string"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def allowed_image_formats_list(self) -> List[str]:
        """Parse accepted image formats from a comma separated string"""
        return [fmt.strip().lower() for fmt in self.ALLOWED_IMAGE_FORMATS.split(",")]


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings (singleton)"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
