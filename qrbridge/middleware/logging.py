"""
QR Bridge — Request Logging Middleware
========================================

What:  One log line per HTTP request: method, path, status, duration, client,
       plus what the request did with a QR image.
When:  Runs after RequestIDMiddleware so the request ID is available.

Example:
    2024-01-15T12:00:00 [INFO] qrbridge.access: POST /api/qr/generate 200 12.9ms [a1b2c3d4] from 10.0.0.7 download=Test_QR.png
    2024-01-15T12:00:01 [WARNING] qrbridge.access: POST /api/qr/read 422 41.3ms [e5f6a7b8] from 10.0.0.7 upload=photo.jpg error=symbol_not_found

Request bodies (records, uploaded images) are never logged.
"""

import logging
import time
from typing import Optional
from urllib.parse import unquote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from qrbridge.middleware.request_id import request_id_var

logger = logging.getLogger("qrbridge.access")


def download_name(header: Optional[str]) -> Optional[str]:
    """Filename carried by a Content-Disposition value, in either encoding."""
    if not header:
        return None
    for part in header.split(";"):
        key, _, value = part.strip().partition("=")
        if key == "filename*" and value.startswith("UTF-8''"):
            return unquote(value[len("UTF-8''"):])
        if key == "filename":
            return value.strip('"')
    return None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its status and duration.

    Log level follows the status class: 5xx → ERROR, 4xx → WARNING,
    everything else → INFO. /health is not logged.

    Transcoding requests also log the download filename (generate), the
    upload filename (read) and the error code of the stage that failed.
    Route handlers and exception handlers leave these on request.state.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        download = download_name(response.headers.get("content-disposition"))
        upload = getattr(request.state, "upload_filename", None)
        error_code = getattr(request.state, "error_code", None)

        outcome = []
        if download is not None:
            outcome.append(f"download={download}")
        if upload is not None:
            outcome.append(f"upload={upload}")
        if error_code is not None:
            outcome.append(f"error={error_code}")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            "".join(" " + item for item in outcome),
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "download_filename": download,
                "upload_filename": upload,
                "error_code": error_code,
            },
        )

        return response
