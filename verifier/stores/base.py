from __future__ import annotations

from typing import Protocol

from verifier.services.types import Channel, VerificationRequest


class Store(Protocol):
    """Durable keyed storage for verification requests.

    ``read_last_pending`` raises ``NotFoundError`` when nothing matches; any
    backend failure surfaces as ``StoreError``. ``update`` must refuse to
    overwrite a record whose persisted status is already terminal.
    """

    def create(self, request: VerificationRequest) -> VerificationRequest:
        ...

    def read_last_pending(self, channel: Channel, recipient: str) -> VerificationRequest:
        ...

    def update(self, request_id: str, request: VerificationRequest) -> VerificationRequest:
        ...
