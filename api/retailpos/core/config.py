from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 1440
    log_level: str = "INFO"
    auto_create_schema: bool = False

    # Checkout rules
    allow_oversell: bool = True
    enforce_credit_limit: bool = False
    payment_epsilon: Decimal = Decimal("0.01")

    # Customer reports
    overdue_days: int = 30
    credit_limit_warning_ratio: Decimal = Decimal("0.8")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
