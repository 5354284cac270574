from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Any

from verifier.core.errors import ConfigurationError, EmailDeliveryError


class SmtpEmailChannel:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        use_ssl: bool = False,
        timeout: float = 15,
    ):
        if not str(host or "").strip() or not int(port or 0):
            raise ConfigurationError("SMTP_HOST/SMTP_PORT are not configured")
        if use_tls and use_ssl:
            raise ConfigurationError("SMTP_USE_TLS and SMTP_USE_SSL cannot both be enabled")
        self.host = str(host).strip()
        self.port = int(port)
        self.username = str(username or "").strip()
        self.password = str(password or "")
        self.use_tls = bool(use_tls)
        self.use_ssl = bool(use_ssl)
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(host=self.host, port=self.port, timeout=self.timeout)
        return smtplib.SMTP(host=self.host, port=self.port, timeout=self.timeout)

    def send(self, sender: str, recipient: str, subject: str, body: str) -> dict[str, Any]:
        if not str(sender or "").strip():
            raise EmailDeliveryError("sender address is required")

        msg = EmailMessage()
        msg["From"] = sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body, subtype="html")

        try:
            with self._connect() as client:
                client.ehlo()
                if self.use_tls:
                    client.starttls()
                    client.ehlo()
                if self.username:
                    client.login(self.username, self.password)
                refused = client.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise EmailDeliveryError(f"SMTP delivery failed: {exc}") from exc

        return {
            "provider": "smtp",
            "status": "accepted",
            "sent": True,
            "refused": {str(k): str(v) for k, v in (refused or {}).items()},
        }
