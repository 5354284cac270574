from __future__ import annotations


class VerificationError(Exception):
    """Base exception for every failure raised by the verifier."""


class InvalidEmailError(VerificationError):
    pass


class InvalidMobileNumberError(VerificationError):
    pass


class EmptyBodyError(VerificationError):
    pass


class EmptyEmailBodyError(EmptyBodyError):
    pass


class EmptyMobileBodyError(EmptyBodyError):
    pass


class NotFoundError(VerificationError):
    """No pending verification request exists for the channel and recipient."""


class MaximumAttemptsExceededError(VerificationError):
    pass


class SecretExpiredError(VerificationError):
    pass


class InvalidSecretError(VerificationError):
    pass


class TerminalStatusError(VerificationError):
    """The request already reached a terminal status and cannot change."""


class StoreError(VerificationError):
    pass


class DispatchError(VerificationError):
    pass


class EmailDeliveryError(DispatchError):
    pass


class SmsDeliveryError(DispatchError):
    pass


class ConfigurationError(VerificationError):
    pass
