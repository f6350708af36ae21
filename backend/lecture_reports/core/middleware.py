"""
Lecture Reports - HTTP Middleware
Request tracing, security headers and the request body cap
"""

import time
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from lecture_reports.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
)
from lecture_reports.utils.responses import error_body

# Probes and docs are polled constantly; keep them out of the request log
QUIET_PATHS = frozenset({"/", "/health", "/api/v1/health", "/api/v1/health/ready", "/docs", "/redoc", "/openapi.json", "/favicon.ico"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an X-Request-ID (taken from the client when sent),
    log its outcome and timing, and echo both back as response headers.
    """

    def __init__(self, app: ASGIApp, slow_request_ms: float = 1000):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        quiet = path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.log_error_with_context(
                exc,
                context=f"{request.method} {path}",
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            raise
        finally:
            set_user_id("")

        duration_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if not quiet:
            logger.log_request(
                request.method, path, response.status_code, duration_ms,
                client_ip=request.client.host if request.client else None,
            )
            if duration_ms > self.slow_request_ms:
                logger.warning(f"Slow request: {request.method} {path} took {duration_ms:.0f}ms")

        set_request_id("")
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Standard hardening headers; API payloads carry student data so they are never cached"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies larger than max_size with 413 before they are read"""

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                f"Rejected {declared} byte body on {request.url.path} (limit {self.max_size})"
            )
            return JSONResponse(
                status_code=413,
                content=error_body(
                    f"Request body too large. Maximum size is {self.max_size // 1024}KB",
                    "REQUEST_TOO_LARGE",
                    {"max_size": self.max_size},
                ),
            )

        return await call_next(request)
