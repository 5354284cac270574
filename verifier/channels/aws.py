from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from verifier.core.errors import EmailDeliveryError, SmsDeliveryError

CHARSET = "UTF-8"


def _client_config() -> Config:
    return Config(connect_timeout=3, read_timeout=5, retries={"max_attempts": 0})


def build_aws_client(
    service: str,
    *,
    region: str,
    access_key: str = "",
    secret_key: str = "",
    endpoint_url: str = "",
):
    kwargs: dict[str, Any] = {"region_name": region, "config": _client_config()}
    if access_key and secret_key:
        kwargs["aws_access_key_id"] = access_key
        kwargs["aws_secret_access_key"] = secret_key
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return boto3.client(service, **kwargs)


def _error_code(exc: Exception) -> str:
    if isinstance(exc, ClientError):
        return str(exc.response.get("Error", {}).get("Code", ""))
    return exc.__class__.__name__


class SesEmailChannel:
    """Sends HTML email through Amazon SES."""

    def __init__(self, client):
        self.client = client

    @staticmethod
    def email_input(sender: str, recipient: str, subject: str, html_body: str) -> dict[str, Any]:
        return {
            "Source": sender,
            "Destination": {"ToAddresses": [recipient], "CcAddresses": []},
            "Message": {
                "Subject": {"Charset": CHARSET, "Data": subject},
                "Body": {"Html": {"Charset": CHARSET, "Data": html_body}},
            },
        }

    def send(self, sender: str, recipient: str, subject: str, body: str) -> dict[str, Any]:
        if not str(sender or "").strip():
            raise EmailDeliveryError("sender address is required")
        try:
            response = self.client.send_email(**self.email_input(sender, recipient, subject, body))
        except (BotoCoreError, ClientError) as exc:
            raise EmailDeliveryError(f"SES send_email failed ({_error_code(exc)}): {exc}") from exc
        return {
            "provider": "aws_ses",
            "status": "accepted",
            "sent": True,
            "message_id": response.get("MessageId"),
        }


class SnsSmsChannel:
    """Publishes SMS directly to a phone number through Amazon SNS."""

    def __init__(self, client, *, sms_type: str = "Transactional"):
        self.client = client
        self.sms_type = sms_type

    def send(self, recipient: str, body: str) -> dict[str, Any]:
        params: dict[str, Any] = {"PhoneNumber": recipient, "Message": body}
        if self.sms_type:
            params["MessageAttributes"] = {
                "AWS.SNS.SMS.SMSType": {"DataType": "String", "StringValue": self.sms_type},
            }
        try:
            response = self.client.publish(**params)
        except (BotoCoreError, ClientError) as exc:
            raise SmsDeliveryError(f"SNS publish failed ({_error_code(exc)}): {exc}") from exc
        return {
            "provider": "aws_sns",
            "status": "accepted",
            "sent": True,
            "message_id": response.get("MessageId"),
        }
