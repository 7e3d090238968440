"""
VoiceNote Backend — Request Logging Middleware
===============================================

What:  One access-log line per request: method, path, status, duration,
       request ID and client IP.
How:   Measures time around `call_next`; the log level follows the status
       class (5xx → ERROR, 4xx → WARNING, otherwise INFO).

Never logged: request bodies (Notion tokens, transcriptions), uploaded
audio, or query strings (OAuth codes).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("voicenote.access")

# Liveness probes run constantly; logging them buries real traffic
SKIPPED_PATHS = {"/", "/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        try:
            response = await call_next(request)
        except Exception:
            # The fallback exception handler answers 500 after we re-raise
            self._log(request, path, 500, start_time, rid, client_ip)
            raise

        self._log(request, path, response.status_code, start_time, rid, client_ip)
        return response

    def _log(
        self,
        request: Request,
        path: str,
        status: int,
        start_time: float,
        rid: str,
        client_ip: str,
    ) -> None:
        duration_ms = (time.perf_counter() - start_time) * 1000
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
