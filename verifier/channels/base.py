from __future__ import annotations

from typing import Any, Protocol


class EmailChannel(Protocol):
    # The returned value is the provider acknowledgment (message id, raw
    # response, ...). It is stored as-is in the dispatch log.
    def send(self, sender: str, recipient: str, subject: str, body: str) -> Any:
        ...


class MobileChannel(Protocol):
    def send(self, recipient: str, body: str) -> Any:
        ...
