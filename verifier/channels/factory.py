from __future__ import annotations

from verifier.channels.aws import SesEmailChannel, SnsSmsChannel, build_aws_client
from verifier.channels.base import EmailChannel, MobileChannel
from verifier.channels.dummy import DummyEmailChannel, DummySmsChannel
from verifier.channels.smtp import SmtpEmailChannel
from verifier.core.config import Settings, settings
from verifier.core.errors import ConfigurationError

_DUMMY_PROVIDERS = {"", "dummy", "mock", "console"}


def _aws_client(service: str, cfg: Settings):
    return build_aws_client(
        service,
        region=cfg.AWS_REGION,
        access_key=str(cfg.AWS_ACCESS_KEY_ID or "").strip(),
        secret_key=str(cfg.AWS_SECRET_ACCESS_KEY or "").strip(),
        endpoint_url=str(cfg.AWS_ENDPOINT_URL or "").strip(),
    )


def build_email_channel(source: Settings | None = None) -> EmailChannel:
    cfg = source or settings
    provider = str(cfg.EMAIL_PROVIDER or "dummy").strip().lower()
    if provider in _DUMMY_PROVIDERS:
        return DummyEmailChannel()
    if provider == "smtp":
        return SmtpEmailChannel(
            host=cfg.SMTP_HOST,
            port=cfg.SMTP_PORT,
            username=cfg.SMTP_USER,
            password=cfg.SMTP_PASSWORD,
            use_tls=cfg.SMTP_USE_TLS,
            use_ssl=cfg.SMTP_USE_SSL,
            timeout=cfg.SMTP_TIMEOUT_SECONDS,
        )
    if provider in {"aws_ses", "ses"}:
        return SesEmailChannel(_aws_client("ses", cfg))
    raise ConfigurationError(f"unknown EMAIL_PROVIDER: {provider}")


def build_mobile_channel(source: Settings | None = None) -> MobileChannel:
    cfg = source or settings
    provider = str(cfg.SMS_PROVIDER or "dummy").strip().lower()
    if provider in _DUMMY_PROVIDERS:
        return DummySmsChannel()
    if provider in {"aws_sns", "sns"}:
        return SnsSmsChannel(_aws_client("sns", cfg), sms_type=str(cfg.AWS_SNS_SMS_TYPE or "").strip())
    raise ConfigurationError(f"unknown SMS_PROVIDER: {provider}")
