from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_VERIFY_ATTEMPTS = 3


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "otp-verifier"

    CORS_ORIGINS: str = "http://localhost:3000"

    DATABASE_URL: str
    REDIS_URL: str

    STORE_BACKEND: str = "sql"  # sql | redis | memory
    REDIS_KEY_PREFIX: str = "verifier"
    REDIS_RETENTION_SECONDS: int = 86400
    VERIFICATION_RETENTION_DAYS: int = 30

    EMAIL_PROVIDER: str = "dummy"  # dummy | smtp | aws_ses
    SMS_PROVIDER: str = "dummy"  # dummy | aws_sns

    AWS_REGION: str = "us-west-2"
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_ENDPOINT_URL: str = ""
    AWS_SNS_SMS_TYPE: str = "Transactional"

    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT_SECONDS: int = 15

    DEFAULT_EMAIL_SENDER: str = "noreply@example.com"
    DEFAULT_EMAIL_SUBJECT: str = ""
    EMAIL_CALLBACK_URL: str = "http://localhost:8000/api/public/verification/email/callback"
    EMAIL_OTP_TTL_SECONDS: int = 12 * 3600
    MOBILE_OTP_TTL_SECONDS: int = 10 * 60
    MAX_VERIFY_ATTEMPTS: int = DEFAULT_MAX_VERIFY_ATTEMPTS
    OTP_EMAIL_TEMPLATE: str = ""
    OTP_SMS_TEMPLATE: str = ""

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()


@dataclass
class VerifierConfig:
    """Everything the lifecycle manager reads at runtime.

    Kept separate from ``Settings`` so the manager can be built without an
    environment (tests, embedding in another service).
    """

    email_otp_ttl: timedelta = timedelta(hours=12)
    mobile_otp_ttl: timedelta = timedelta(minutes=10)
    max_verify_attempts: int = DEFAULT_MAX_VERIFY_ATTEMPTS
    default_email_sender: str = ""
    default_email_subject: str = ""
    email_callback_url: str = ""
    email_template: str = ""
    sms_template: str = ""

    def __post_init__(self) -> None:
        if int(self.max_verify_attempts or 0) < 1:
            self.max_verify_attempts = DEFAULT_MAX_VERIFY_ATTEMPTS


def verifier_config_from_settings(source: Settings | None = None) -> VerifierConfig:
    cfg = source or settings
    return VerifierConfig(
        email_otp_ttl=timedelta(seconds=max(int(cfg.EMAIL_OTP_TTL_SECONDS), 0)),
        mobile_otp_ttl=timedelta(seconds=max(int(cfg.MOBILE_OTP_TTL_SECONDS), 0)),
        max_verify_attempts=int(cfg.MAX_VERIFY_ATTEMPTS),
        default_email_sender=str(cfg.DEFAULT_EMAIL_SENDER or "").strip(),
        default_email_subject=str(cfg.DEFAULT_EMAIL_SUBJECT or "").strip(),
        email_callback_url=str(cfg.EMAIL_CALLBACK_URL or "").strip(),
        email_template=str(cfg.OTP_EMAIL_TEMPLATE or ""),
        sms_template=str(cfg.OTP_SMS_TEMPLATE or ""),
    )
