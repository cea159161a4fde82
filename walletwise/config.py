"""
Application configuration using Pydantic Settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Upstream WalletWise API (источник профиля, кошельков и курсов валют)
    UPSTREAM_API_URL: str = "http://localhost:3000/api/v1"

    # FX rates
    FX_RATES_TIMEOUT_SECONDS: float = 5.0
    FX_RATES_TTL_SECONDS: int = 3600  # как staleTime в клиенте: 1 час

    # Application
    DEFAULT_CURRENCY: str = "USD"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Игнорировать дополнительные поля из переменных окружения
    )

    def get_upstream_url(self, path: str) -> str:
        """
        Join UPSTREAM_API_URL with an endpoint path (без двойных слэшей)
        """
        return f"{self.UPSTREAM_API_URL.rstrip('/')}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings instance (singleton)
    """
    return Settings()
