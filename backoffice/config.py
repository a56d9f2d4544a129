from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ==============================
    # Application
    # ==============================
    APP_NAME: str = "Shop Back-Office"
    ENVIRONMENT: str = "local"
    CURRENCY: str = "KSH"

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./backoffice.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Stock thresholds
    # ==============================
    LOW_STOCK_UNITS: int = 5
    LOW_STOCK_ML: int = 50

    # ==============================
    # Catalog defaults
    # ==============================
    DEFAULT_SUPPLIER: str = "N/A"


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings"]
