from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal

class Settings(BaseSettings):

    PAYPAL_CLIENT_ID: str | None = None
    PAYPAL_CLIENT_SECRET: str | None = None
    PAYPAL_WEBHOOK_ID: str | None = None
    PAYPAL_API_BASE: str = "https://api-m.sandbox.paypal.com"

    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-1.5-flash-latest"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    GENERATION_TIMEOUT_SECONDS: float = 10.0

    MAIL_TRANSPORT: Literal["smtp", "ses"] = "smtp"
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASS: str | None = None
    SMTP_START_TLS: bool = True
    EMAIL_FROM: str = "no-reply@hopespring.org"
    EMAIL_FROM_NAME: str = "HopeSpring Foundation"
    DELIVERY_TIMEOUT_SECONDS: float = 15.0

    AWS_REGION: str | None = None
    IDEMPOTENCY_TABLE_NAME: str | None = None
    IDEMPOTENCY_CLAIM_TTL_SECONDS: float = 300.0

    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",            
        env_file_encoding="utf-8",
        case_sensitive=False,      
        extra="ignore"            
    )

    @property
    def webhook_verification_enabled(self) -> bool:
        return bool(self.PAYPAL_WEBHOOK_ID and self.PAYPAL_CLIENT_ID and self.PAYPAL_CLIENT_SECRET)

@lru_cache()
def get_settings() -> Settings:
    return Settings()
