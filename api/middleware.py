"""
Global middleware: per-request id and timing.

Every response carries ``X-Request-ID`` (echoed from the client when sent,
generated otherwise) and ``X-Process-Time`` in seconds.
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    # client-supplied ids end up in logs, keep them short
    return incoming[:64] if incoming else uuid.uuid4().hex


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = _request_id(request)
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - start
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"
        level = logging.WARNING if response.status_code >= 500 else logging.DEBUG
        logger.log(
            level,
            "[%s] %s %s -> %d in %.3fs",
            request_id, request.method, request.url.path, response.status_code, elapsed,
        )
        return response
