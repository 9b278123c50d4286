"""
Configuration management for ApplyPDF API
Loads settings from environment variables
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./applypdf.db"

    # File Storage
    STORAGE_DIR: str = "./storage"
    MAX_FILE_SIZE: int = 10485760  # 10MB
    ALLOWED_MIME_TYPES: str = "application/pdf"
    MAX_FILE_NAME_LENGTH: int = 255
    TEMP_FILE_MAX_AGE_HOURS: int = 24

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "ApplyPDF API"
    VERSION: str = "1.0.0"

    # CORS
    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000", "http://localhost:5173"]'

    # PDF template
    PDF_TITLE: str = "JOB APPLICATION FORM"
    POSITION_TITLE: str = "Software Engineer - Full Stack Developer"

    # Application
    ENVIRONMENT: str = "development"  # 'development', 'production' or 'test'
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow"
    )

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from JSON string"""
        try:
            return json.loads(self.BACKEND_CORS_ORIGINS)
        except (ValueError, TypeError):
            return ["http://localhost:3000", "http://localhost:5173"]

    @property
    def allowed_mime_types_list(self) -> List[str]:
        """Get allowed upload MIME types as a list"""
        return [mime.strip() for mime in self.ALLOWED_MIME_TYPES.split(',') if mime.strip()]

    @property
    def is_development(self) -> bool:
        """Internal error messages are only exposed to clients in development"""
        return self.DEBUG or self.ENVIRONMENT == "development"


# Global settings instance
settings = Settings()
