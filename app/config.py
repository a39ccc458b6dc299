"""Application configuration management using Pydantic Settings."""

from typing import Annotated, List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(..., alias="SECRET_KEY")
    flask_app: str = Field(default="wsgi.py", alias="FLASK_APP")
    flask_env: str = Field(default="development", alias="FLASK_ENV")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # FIRE Defaults
    default_withdrawal_rate: float = Field(
        default=4.0, gt=0, le=100, alias="DEFAULT_WITHDRAWAL_RATE"
    )
    max_projection_years: int = Field(
        default=100, ge=1, le=100, alias="MAX_PROJECTION_YEARS"
    )
    default_projection_years: int = Field(
        default=50, ge=1, alias="DEFAULT_PROJECTION_YEARS"
    )

    # Performance Defaults
    risk_free_rate: float = Field(default=2.0, allow_inf_nan=False, alias="RISK_FREE_RATE")
    doubling_thresholds: Annotated[List[float], NoDecode] = Field(
        default=[100_000, 200_000, 500_000, 1_000_000, 2_000_000],
        alias="DOUBLING_THRESHOLDS",
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is provided and not a placeholder."""
        if not v or v == "your-secret-key-here-change-in-production":
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("default_projection_years")
    @classmethod
    def validate_default_projection_years(cls, v: int, info: ValidationInfo) -> int:
        """Default horizon may not exceed the maximum horizon."""
        max_years = info.data.get("max_projection_years", v)
        if v > max_years:
            raise ValueError(
                "DEFAULT_PROJECTION_YEARS must be <= MAX_PROJECTION_YEARS"
            )
        return v

    @field_validator("doubling_thresholds", mode="before")
    @classmethod
    def parse_doubling_thresholds(cls, v):
        """Accept a comma-separated string such as '100000,200000'."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("doubling_thresholds")
    @classmethod
    def validate_doubling_thresholds(cls, v: List[float]) -> List[float]:
        """Thresholds must be positive; they are stored sorted."""
        if not v:
            raise ValueError("DOUBLING_THRESHOLDS must not be empty")
        if any(level <= 0 for level in v):
            raise ValueError("DOUBLING_THRESHOLDS must be positive")
        return sorted(v)


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


# Global settings instance - will be created when first requested
_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None
