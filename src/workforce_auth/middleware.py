"""
HTTP middleware.

- RequestIDMiddleware: assigns the correlation id shared by logs, audit
  records and error envelopes
- SecurityHeadersMiddleware: hardening headers; API responses are never cached
- RequestLoggingMiddleware: one access log line per request
"""

import logging
import re
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from workforce_auth.core.logging import request_id_var

logger = logging.getLogger(__name__)

# Upstream request ids are accepted only in this shape
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{8,64}$")

# Probes are polled constantly; keep them out of the INFO stream
_QUIET_PATHS = ("/health",)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Reuse a well-formed incoming X-Request-ID or mint a new one.

    The id is stored on ``request.state.request_id``, published through
    ``request_id_var`` for the logging filters, and echoed in the
    X-Request-ID response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())

        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add hardening headers to every response.

    API responses carry session tokens and profile data, so they get
    ``Cache-Control: no-store`` and a deny-all content security policy.
    The interactive docs (debug only) need scripts from the CDN.
    """

    _API_CSP = "default-src 'none'; frame-ancestors 'none'"
    _DOCS_CSP = (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://fastapi.tiangolo.com; "
        "frame-ancestors 'none'"
    )

    def __init__(self, app: ASGIApp, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        path = request.url.path

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"

        if path.startswith(("/docs", "/redoc", "/openapi.json")):
            response.headers["Content-Security-Policy"] = self._DOCS_CSP
        else:
            response.headers["Content-Security-Policy"] = self._API_CSP

        if path.startswith("/api"):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and latency for each request.

    5xx logs at ERROR, 4xx at WARNING, everything else at INFO (DEBUG for
    health probes). Query strings and headers are never logged since they
    may carry credentials.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "-"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s raised after %.1fms",
                method,
                path,
                (time.perf_counter() - started) * 1000,
                extra={"client_ip": client_ip},
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        status_code = response.status_code

        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        elif path.startswith(_QUIET_PATHS):
            level = logging.DEBUG
        else:
            level = logging.INFO

        logger.log(
            level,
            "%s %s %d %.1fms",
            method,
            path,
            status_code,
            elapsed_ms,
            extra={
                "client_ip": client_ip,
                "status_code": status_code,
                "duration_ms": round(elapsed_ms, 1),
            },
        )

        response.headers["X-Response-Time"] = f"{elapsed_ms:.1f}ms"
        return response
