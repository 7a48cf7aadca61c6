# flowershop/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./flowershop.db"
    SQL_ECHO: bool = False

    AUTH_SECRET_KEY: str = "change-me"
    AUTH_TOKEN_EXPIRE_MINUTES: int = 1440
    ADMIN_EMAIL: str = "admin@flowershop.local"
    ADMIN_PASSWORD: str = "admin"

    DELIVERY_FEE: int = 59              # pesos, only for delivery_option == "delivery"
    ORDER_NUMBER_PREFIX: str = "ORD-"

    LOG_DIR: str = "log"
    LOG_PRINT: str = "1"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
