from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./pos_checklist.db")
    db_echo: bool = Field(default=False)

    # Tokens. No fallback secret: startup fails when JWT_SECRET_KEY is unset.
    jwt_secret_key: str = Field(..., min_length=16)
    jwt_algorithm: str = Field(default="HS256")
    token_expire_days: int = Field(default=7, ge=1)
    cookie_secure: bool = Field(default=False)

    # Listing
    page_size_default: int = Field(default=10, ge=1)
    page_size_max: int = Field(default=100, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False)

    # HTTP
    cors_origins: list[str] = Field(default=["*"])

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
