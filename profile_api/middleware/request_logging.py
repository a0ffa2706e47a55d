"""Request logging middleware to trace requests, durations and identity.

- Adds a unique X-Request-ID header to responses (and uses any incoming header)
- Logs method, path, status, duration, client IP and token subject
- Does not log request/response bodies or headers, so passwords and tokens
  never reach the logs
"""
from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from profile_api.core.exceptions import AuthenticationError


logger = logging.getLogger("profile_api.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request/response metadata for tracing."""

    def _token_subject(self, request: Request) -> Optional[str]:
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.lower().startswith("bearer "):
            return None
        parts = auth_header.split(None, 1)
        if len(parts) != 2:
            return None
        try:
            return request.app.state.token_issuer.verify(parts[1])
        except AuthenticationError:
            return None

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        start = time.monotonic()

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        user_sub = self._token_subject(request)
        client_ip = request.client.host if request.client else None

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.monotonic() - start) * 1000)
            # Traceback is logged by the unhandled-error handler
            logger.error(
                f"{request.method} {request.url.path} failed after {duration_ms}ms",
                extra={
                    "request_id": request_id,
                    "client_ip": client_ip,
                    "user_sub": user_sub,
                },
            )
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
            extra={
                "request_id": request_id,
                "client_ip": client_ip,
                "user_sub": user_sub,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers.setdefault("X-Request-ID", request_id)
        return response
