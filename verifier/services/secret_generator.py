from __future__ import annotations

import random
import string

ALPHANUMERIC = string.ascii_lowercase + string.ascii_uppercase + string.digits
NUMERIC = string.digits

EMAIL_SECRET_LENGTH = 256
MOBILE_SECRET_LENGTH = 6
REQUEST_ID_LENGTH = 32
REQUEST_ID_PREFIX = "verreq-"


class SecretGenerator:
    """Draws OTPs and request IDs from an injected random source.

    The default source is ``random.SystemRandom`` (backed by ``os.urandom``);
    tests may pass a seeded ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng if rng is not None else random.SystemRandom()

    def generate(self, alphabet: str, length: int) -> str:
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if int(length) < 0:
            raise ValueError("length must not be negative")
        return "".join(self._rng.choice(alphabet) for _ in range(int(length)))

    def alphanumeric(self, length: int) -> str:
        return self.generate(ALPHANUMERIC, length)

    def numeric(self, length: int) -> str:
        return self.generate(NUMERIC, length)

    def email_secret(self) -> str:
        return self.alphanumeric(EMAIL_SECRET_LENGTH)

    def mobile_secret(self) -> str:
        return self.numeric(MOBILE_SECRET_LENGTH)

    def request_id(self) -> str:
        return REQUEST_ID_PREFIX + self.alphanumeric(REQUEST_ID_LENGTH)
