"""ASGI middleware for request correlation and body size limits."""

from __future__ import annotations

import time
import uuid

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from salesboard.core.config import settings
from salesboard.core.logging import request_id_ctx_var, user_id_ctx_var

REQUEST_ID_HEADER = "X-Request-ID"
PROBE_PATHS = frozenset({"/api/healthz", "/api/readyz"})


def _request_id(request: Request) -> str:
    incoming = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    # clients may send their own id; anything oversized is replaced
    return incoming if 0 < len(incoming) <= 64 else uuid.uuid4().hex


class RequestContextLogMiddleware(BaseHTTPMiddleware):
    """Binds the request id for the duration of a request and logs its outcome.

    Probe endpoints are not logged. Requests slower than ``SLOW_REQUEST_MS``
    are logged at WARNING.
    """

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = _request_id(request)
        request.state.request_id = request_id
        request_token = request_id_ctx_var.set(request_id)
        user_token = user_id_ctx_var.set("-")
        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            path = request.url.path
            if path not in PROBE_PATHS:
                record = logger.bind(
                    method=request.method,
                    path=path,
                    status=response.status_code if response else 500,
                    duration_ms=elapsed_ms,
                    user_id=getattr(request.state, "user_id", "-"),
                )
                if elapsed_ms > settings.SLOW_REQUEST_MS:
                    record.warning("request_slow")
                else:
                    record.info("request_completed")
            if response is not None:
                response.headers.setdefault(REQUEST_ID_HEADER, request_id)
            request_id_ctx_var.reset(request_token)
            user_id_ctx_var.reset(user_token)


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose declared length exceeds ``MAX_UPLOAD_BYTES``."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > settings.MAX_UPLOAD_BYTES:
            logger.bind(path=request.url.path, content_length=int(declared)).info(
                "request_body_too_large"
            )
            return JSONResponse(
                status_code=413,
                content={"detail": f"Request body exceeds {settings.MAX_UPLOAD_BYTES} bytes"},
            )
        return await call_next(request)
