from __future__ import annotations

import logging
import re
from contextvars import ContextVar
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("verifier.http")

_current_request_id: ContextVar[str] = ContextVar("verifier_request_id", default="-")

RESPONSE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    # Verification links carry the secret in the query string.
    "Cache-Control": "no-store",
}


def request_id_from_header(raw: str | None) -> str:
    value = str(raw or "").strip()
    if value and _REQUEST_ID_RE.fullmatch(value):
        return value
    return uuid4().hex


def current_request_id() -> str:
    """Request id of the HTTP call being served, ``-`` outside of one."""
    return _current_request_id.get()


def _loggable_path(request: Request) -> str:
    # Never log query strings: the email callback receives the secret there.
    return request.url.path


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _request_context_middleware(request: Request, call_next):
        request_id = request_id_from_header(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        token = _current_request_id.set(request_id)
        started_at = perf_counter()
        try:
            response = await call_next(request)
        finally:
            _current_request_id.reset(token)

        response.headers.update(RESPONSE_HEADERS)
        response.headers[REQUEST_ID_HEADER] = request_id

        _LOG.info(
            "%s %s status=%s duration_ms=%.2f request_id=%s",
            request.method,
            _loggable_path(request),
            response.status_code,
            (perf_counter() - started_at) * 1000.0,
            request_id,
        )
        return response
