from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./ambulance.db"
    DB_POOL_SIZE: int = 5

    # Encryption
    FIELD_ENCRYPTION_KEY: str = ""
    SECRET_KEY: str = ""

    # Auth
    AUTH_MODE: str = "dev_stub"
    ACCESS_TOKEN_HOURS: int = 8
    DEV_ADMIN_EMAIL: str = "admin@example.com"
    DEV_ADMIN_PASSWORD: str = "ChangeMe_123!"
    DEV_ADMIN_NAME: str = "Dispatch Admin"

    # Notifications
    IN_APP_NOTIFICATIONS_ENABLED: bool = True

    # Ambulance listing column set: auto | extended | reduced
    AMBULANCE_LISTING_SCHEMA: str = "auto"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    AUDIT_EXPORT_PATH: str | None = None

    # Environment
    ENVIRONMENT: str = "dev"
    SYNTHETIC_DATA_MODE: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
