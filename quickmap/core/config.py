"""Application configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "QuickMap"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENV: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    FRONTEND_URL: str | None = None

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./quickmap.db"
    DATABASE_ECHO: bool = False

    # Completion endpoint
    OPENAI_API_KEY: str | None = None
    OPENAI_API_BASE_URL: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.4
    OPENAI_MAX_TOKENS: int = 2000
    OPENAI_TIMEOUT_SECONDS: float = 30.0

    # Identity provider
    IDENTITY_URL: str = "http://localhost:54321"
    IDENTITY_API_KEY: str | None = None
    IDENTITY_TIMEOUT_SECONDS: float = 10.0
    AUTH_COOKIE_NAME: str = "access_token"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENV == "production"

    @property
    def cors_origins(self) -> list[str]:
        """Origins allowed to call the API with credentials."""
        origins = [self.FRONTEND_URL, "http://localhost:3000", "http://127.0.0.1:3000"]
        return [origin for origin in origins if origin]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
