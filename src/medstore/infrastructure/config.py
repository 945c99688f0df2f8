"""Runtime settings, read from the environment (prefix ``MEDSTORE_``) or ``.env``."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MEDSTORE_", env_file=".env", extra="ignore")

    # ==============================
    # Database
    # ==============================
    DATABASE_URL: str = "sqlite:///./medstore.db"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # ==============================
    # Purchasing
    # ==============================
    STRICT_RECEIPT_STATUS: bool = False
    DEFAULT_PAYMENT_TERMS_DAYS: int = 7


@lru_cache
def get_settings() -> Settings:
    return Settings()
