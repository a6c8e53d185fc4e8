"""
Centralized configuration management.

All application configuration is loaded and validated here.
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

NUMERIC_POLICIES = ("permissive", "majority")


def _split_keywords(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Application settings with validation."""

    # File upload settings
    max_file_size_mb: int = Field(default=10, ge=1, le=200, description="Maximum file size in MB")

    # Rate limiting
    rate_limit_per_minute: int = Field(default=30, ge=1, le=1000, description="Rate limit per minute per IP")

    # Request timeout
    request_timeout_seconds: int = Field(default=60, ge=1, le=3600, description="Request timeout in seconds")

    # CORS
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Analysis rules
    numeric_policy: str = Field(default="permissive", description="Numeric column inference policy")
    identifier_keywords: str = Field(
        default="student,name",
        description="Comma-separated substrings marking the identifier column"
    )
    identifier_exact_keywords: str = Field(
        default="id",
        description="Comma-separated exact names marking the identifier column"
    )
    category_keywords: str = Field(
        default="grade",
        description="Comma-separated substrings marking the category column"
    )
    outlier_factor: float = Field(default=1.5, gt=1.0, le=10.0, description="Multiple of the mean counted as an outlier")
    quality_threshold: int = Field(default=90, ge=0, le=100, description="Completeness percentage considered good")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @field_validator('numeric_policy')
    @classmethod
    def validate_numeric_policy(cls, v: str) -> str:
        if v.lower() not in NUMERIC_POLICIES:
            raise ValueError(f"NUMERIC_POLICY must be one of {list(NUMERIC_POLICIES)}, got '{v}'")
        return v.lower()

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def identifier_keyword_list(self) -> List[str]:
        return _split_keywords(self.identifier_keywords)

    @property
    def identifier_exact_keyword_list(self) -> List[str]:
        return _split_keywords(self.identifier_exact_keywords)

    @property
    def category_keyword_list(self) -> List[str]:
        return _split_keywords(self.category_keywords)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "10")),
            rate_limit_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
            request_timeout_seconds=int(os.getenv("REQUEST_TIMEOUT_SECONDS", "60")),
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            numeric_policy=os.getenv("NUMERIC_POLICY", "permissive"),
            identifier_keywords=os.getenv("IDENTIFIER_KEYWORDS", "student,name"),
            identifier_exact_keywords=os.getenv("IDENTIFIER_EXACT_KEYWORDS", "id"),
            category_keywords=os.getenv("CATEGORY_KEYWORDS", "grade"),
            outlier_factor=float(os.getenv("OUTLIER_FACTOR", "1.5")),
            quality_threshold=int(os.getenv("QUALITY_THRESHOLD", "90")),
        )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Reload settings (useful for testing)."""
    global _settings
    _settings = None
    return get_settings()
