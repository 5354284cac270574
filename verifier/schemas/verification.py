from pydantic import BaseModel, Field
from typing import Optional


class EmailVerificationSend(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    subject: Optional[str] = Field(default=None, max_length=200)


class MobileVerificationSend(BaseModel):
    mobile: str = Field(min_length=1, max_length=32)


class VerificationSent(BaseModel):
    status: str = "sent"
    channel: str
    request_id: str
    expires_at: str


class SecretVerify(BaseModel):
    channel: str
    recipient: str = Field(min_length=1, max_length=320)
    secret: str = Field(min_length=1, max_length=512)


class SecretVerified(BaseModel):
    status: str = "verified"
    channel: str
    request_id: str
