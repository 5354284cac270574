from __future__ import annotations

from functools import lru_cache

from verifier.channels.factory import build_email_channel, build_mobile_channel
from verifier.core.config import Settings, settings, verifier_config_from_settings
from verifier.services.verification import Verifier
from verifier.stores.factory import build_store


def build_verifier(source: Settings | None = None) -> Verifier:
    cfg = source or settings
    return Verifier(
        verifier_config_from_settings(cfg),
        build_store(cfg),
        build_email_channel(cfg),
        build_mobile_channel(cfg),
    )


@lru_cache(maxsize=1)
def get_verifier() -> Verifier:
    return build_verifier()
